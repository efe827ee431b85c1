import pytest
from config import Config


@pytest.fixture(autouse=True)
def no_env_file(monkeypatch):
    monkeypatch.setattr('config.load_env_file', lambda: None)


def test_page_limit_defaults_to_100(monkeypatch):
    monkeypatch.delenv('ZELTY_PAGE_LIMIT', raising=False)

    assert Config().page_limit == 100


@pytest.mark.parametrize('value', ['0', '-5'])
def test_non_positive_page_limit_is_rejected(monkeypatch, value):
    monkeypatch.setenv('ZELTY_PAGE_LIMIT', value)

    with pytest.raises(ValueError, match='ZELTY_PAGE_LIMIT'):
        Config()


def test_missing_required_variable_is_rejected(monkeypatch):
    monkeypatch.delenv('API_ZELTY_KEY')

    with pytest.raises(ValueError, match='API_ZELTY_KEY'):
        Config()
