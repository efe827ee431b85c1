#!/usr/bin/env python3

"""
Mapping of Zelty API payloads to the local table columns.

Each mapper returns the mutable columns only; the remote key (``zeltyId``)
is added by the store when upserting.
"""

from datetime import timezone
from typing import Any, Dict, Optional
from dateutil import parser as date_parser

def _or_none(value: Any) -> Any:
    """Empty strings and other falsy values become NULL (image URLs and the like)"""
    return value or None

def _default(value: Any, fallback: Any) -> Any:
    return fallback if value is None else value

def _to_timestamp(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    # Columns are TIMESTAMP without time zone and hold UTC; naive values are read as local time
    return date_parser.isoparse(value).astimezone(timezone.utc).isoformat()

def map_restaurant(restaurant: Dict[str, Any]) -> Dict[str, Any]:
    loc = restaurant.get('loc') or {}

    return {
        'remoteId': restaurant.get('remote_id'),
        'disable': _default(restaurant.get('disable'), False),
        'name': restaurant.get('name'),
        'description': restaurant.get('description'),
        'countryCode': _default(restaurant.get('country_code'), 'FR'),
        'currency': _default(restaurant.get('currency'), 'EUR'),
        'image': _or_none(restaurant.get('image')),
        'defaultLang': _default(restaurant.get('default_lang'), 'fr'),
        'productionDelay': _default(restaurant.get('production_delay'), 0),
        'deliveryTime': _default(restaurant.get('delivery_time'), 0),
        'orderingAvailable': _default(restaurant.get('ordering_available'), True),
        'deliveryCharge': _default(restaurant.get('delivery_charge'), 0),
        'deliveryChargeTva': _default(restaurant.get('delivery_charge_tva'), 0),
        'deliveryMinimum': _default(restaurant.get('delivery_minimum'), 0),
        'deliveryNoChargeMin': _default(restaurant.get('delivery_no_charge_min'), 0),
        'deliveryHours': restaurant.get('delivery_hours'),
        'openingHours': restaurant.get('opening_hours'),
        'openingHoursTxt': restaurant.get('opening_hours_txt'),
        'happyHours': restaurant.get('happy_hours'),
        'closures': _default(restaurant.get('closures'), []),
        'address': restaurant.get('address'),
        'phone': restaurant.get('phone'),
        'publicName': restaurant.get('public_name'),
        'onlineOrderingHidden': _default(restaurant.get('online_ordering_hidden'), False),
        'latitude': loc.get('lat'),
        'longitude': loc.get('lng'),
        'takeawayDelay': _default(restaurant.get('takeaway_delay'), 0),
        'orderingDelay': _default(restaurant.get('ordering_delay'), False),
        'delay': _default(restaurant.get('delay'), 0),
        'meta': restaurant.get('meta'),
    }

def map_dish(dish: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'zeltyRestaurantId': dish.get('id_restaurant'),
        'remoteId': dish.get('remote_id'),
        'sku': dish.get('sku'),
        'name': dish.get('name'),
        'description': dish.get('description'),
        'image': _or_none(dish.get('image')),
        'thumb': _or_none(dish.get('thumb')),
        'price': _default(dish.get('price'), 0),
        'priceTogo': dish.get('price_togo'),
        'priceDelivery': dish.get('price_delivery'),
        'happyPrice': dish.get('happy_price'),
        'costPrice': dish.get('cost_price'),
        'tax': _default(dish.get('tax'), 0),
        'taxTakeaway': dish.get('tax_takeaway'),
        'taxDelivery': dish.get('tax_delivery'),
        'tags': _default(dish.get('tags'), []),
        'options': _default(dish.get('options'), []),
        'fabricationPlaceId': dish.get('id_fabrication_place'),
        'color': dish.get('color'),
        'loyaltyPoints': _default(dish.get('loyalty_points'), 0),
        'earnLoyalty': _default(dish.get('earn_loyalty'), 0),
        'priceToDefine': _default(dish.get('price_to_define'), False),
        'disable': _default(dish.get('disable'), False),
        'disableTakeaway': _default(dish.get('disable_takeaway'), False),
        'disableDelivery': _default(dish.get('disable_delivery'), False),
        'meta': dish.get('meta'),
    }

def map_order(order: Dict[str, Any]) -> Dict[str, Any]:
    price = order.get('price') or {}

    return {
        'zeltyUuid': order.get('uuid'),
        'comment': order.get('comment'),
        'deviceId': order.get('device_id'),
        'closedByDeviceId': order.get('closed_by_device_id'),
        'remoteId': order.get('remote_id'),
        'ref': order.get('ref'),
        'loyalty': _default(order.get('loyalty'), 0),
        'seats': _default(order.get('seats'), 1),
        'tableNumber': order.get('table'),
        'zeltyRestaurantId': order.get('id_restaurant'),
        'zeltyCreatedAt': _to_timestamp(order.get('created_at')),
        'closedAt': _to_timestamp(order.get('closed_at')),
        'dueDate': _to_timestamp(order.get('due_date')),
        'mode': order.get('mode'),
        'fulfillmentType': order.get('fulfillment_type'),
        'source': order.get('source'),
        'originName': order.get('origin_name'),
        'status': order.get('status'),
        'amountIncTax': _default(price.get('final_amount_inc_tax'), 0),
        'amountExcTax': _default(price.get('final_amount_exc_tax'), 0),
        'virtualBrandName': order.get('virtual_brand_name'),
        'firstName': order.get('first_name'),
        'phone': order.get('phone'),
        'buzzerRef': order.get('buzzer_ref'),
        'displayId': order.get('display_id'),
    }

def map_order_item(item: Dict[str, Any], order_id: int) -> Dict[str, Any]:
    # item_id is the dish id, sent as a string
    price = item.get('price') or {}
    tax = price.get('tax') or {}

    return {
        'zeltyOrderId': order_id,
        'zeltyDishId': int(item['item_id']),
        'name': item.get('name'),
        'type': _default(item.get('type'), 'dish'),
        'course': _default(item.get('course'), 0),
        'comment': item.get('comment'),
        'baseOriginalAmountIncTax': _default(price.get('base_original_amount_inc_tax'), 0),
        'originalAmountIncTax': _default(price.get('original_amount_inc_tax'), 0),
        'discountedAmountIncTax': _default(price.get('discounted_amount_inc_tax'), 0),
        'finalAmountIncTax': _default(price.get('final_amount_inc_tax'), 0),
        'taxAmount': _default(tax.get('tax_amount'), 0),
        'taxRate': tax.get('tax_rate'),
        'modifiers': _default(item.get('modifiers'), []),
    }
