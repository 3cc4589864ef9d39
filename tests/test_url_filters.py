"""
Тесты для парсера URL списков веб-интерфейса
"""

import pytest

from amocrm_sdk.utils.urlfilters import (
    ENTITY_TYPE_MAP,
    FilterDescriptor,
    InvalidURLError,
    ParseError,
    UnknownEntityError,
    extract_entity_type,
    parse_url,
)


BASE = "https://example.amocrm.ru"


class TestParseURL:
    """Тесты для parse_url"""

    def test_simple_leads_url(self):
        """Тест: URL сделок без параметров"""
        result = parse_url(f"{BASE}/leads/list/")

        assert result.entity_type == "leads"
        assert result.page == "1"
        assert result.limit == "50"
        assert dict(result.filters) == {}
        assert result.raw_query == ""

    def test_filter_by_name_is_decoded(self):
        """Тест: значение фильтра декодируется, '+' становится пробелом"""
        result = parse_url(f"{BASE}/leads/list/?filter[name]=Тестовая+сделка")

        assert dict(result.filters) == {"filter[name]": "Тестовая сделка"}

    def test_repeated_filter_keeps_first_value(self):
        """Тест: для повторяющегося фильтра берется первое значение"""
        result = parse_url(
            f"{BASE}/leads/list/?filter[status][]=10073462&filter[status][]=10073459"
        )

        assert dict(result.filters) == {"filter[status][]": "10073462"}

    def test_pagination_echoed_verbatim(self):
        """Тест: page и limit возвращаются как есть"""
        result = parse_url(
            f"{BASE}/leads/list/?filter[responsible_user_id][]=9057966&page=2&limit=25"
        )

        assert result.page == "2"
        assert result.limit == "25"
        assert dict(result.filters) == {"filter[responsible_user_id][]": "9057966"}

    def test_contacts_url(self):
        """Тест: URL контактов с кириллицей"""
        result = parse_url(f"{BASE}/contacts/list/?filter[name]=Иван")

        assert result.entity_type == "contacts"
        assert dict(result.filters) == {"filter[name]": "Иван"}
        assert result.page == "1"
        assert result.limit == "50"

    def test_multiple_filters(self):
        """Тест: несколько разных фильтров"""
        result = parse_url(
            f"{BASE}/leads/list/?filter[name]=Тест"
            "&filter[price][from]=1000&filter[price][to]=5000"
        )

        assert dict(result.filters) == {
            "filter[name]": "Тест",
            "filter[price][from]": "1000",
            "filter[price][to]": "5000",
        }

    def test_percent_encoded_keys(self):
        """Тест: закодированные скобки в ключе фильтра"""
        result = parse_url(f"{BASE}/leads/list/?filter%5Bname%5D=Test%20deal")

        assert dict(result.filters) == {"filter[name]": "Test deal"}

    def test_non_filter_params_ignored(self):
        """Тест: посторонние параметры не попадают в фильтры"""
        result = parse_url(
            f"{BASE}/leads/list/?useFilter=y&search=abc&page=3&filter[tag]=vip"
        )

        assert dict(result.filters) == {"filter[tag]": "vip"}
        assert all(key.startswith("filter") for key in result.filters)
        assert result.page == "3"

    def test_blank_filter_value_kept(self):
        """Тест: пустое значение фильтра сохраняется"""
        result = parse_url(f"{BASE}/leads/list/?filter[name]=")

        assert dict(result.filters) == {"filter[name]": ""}

    def test_empty_pagination_uses_defaults(self):
        """Тест: пустые page и limit заменяются значениями по умолчанию"""
        result = parse_url(f"{BASE}/leads/list/?page=&limit=")

        assert result.page == "1"
        assert result.limit == "50"

    def test_first_page_value_wins(self):
        """Тест: берется первое значение page, даже пустое"""
        result = parse_url(f"{BASE}/leads/list/?page=&page=4")

        assert result.page == "1"

    def test_pagination_not_validated(self):
        """Тест: нечисловые page/limit не вызывают ошибку в парсере"""
        result = parse_url(f"{BASE}/leads/list/?page=abc&limit=many")

        assert result.page == "abc"
        assert result.limit == "many"

    def test_raw_query_preserved(self):
        """Тест: исходная строка запроса сохраняется без изменений"""
        query = "filter%5Bname%5D=Test&page=2"
        result = parse_url(f"{BASE}/leads/list/?{query}")

        assert result.raw_query == query

    def test_unmapped_entity_passed_through(self):
        """Тест: неизвестное имя сущности возвращается как есть"""
        result = parse_url(f"{BASE}/todo_items/list/")

        assert result.entity_type == "todo_items"

    def test_relative_url(self):
        """Тест: относительный URL тоже разбирается"""
        result = parse_url("/companies/list?filter[name]=ООО")

        assert result.entity_type == "companies"
        assert dict(result.filters) == {"filter[name]": "ООО"}

    def test_idempotent(self):
        """Тест: повторный разбор дает равный результат"""
        url = f"{BASE}/leads/list/?filter[name]=Test&filter[status][]=1&page=2"

        assert parse_url(url) == parse_url(url)

    def test_filters_are_read_only(self):
        """Тест: карту фильтров нельзя изменить"""
        result = parse_url(f"{BASE}/leads/list/?filter[name]=Test")

        with pytest.raises(TypeError):
            result.filters["filter[name]"] = "Other"

    def test_to_dict(self):
        """Тест: сериализация в словарь"""
        result = parse_url(f"{BASE}/tasks/list/?filter[task_type]=1")

        assert result.to_dict() == {
            "entity_type": "tasks",
            "page": "1",
            "limit": "50",
            "filters": {"filter[task_type]": "1"},
            "raw_query": "filter[task_type]=1",
        }


class TestParseURLErrors:
    """Тесты ошибок parse_url"""

    def test_bare_string_is_unknown_entity(self):
        """Тест: строка без схемы разбирается как путь и не содержит сущности"""
        with pytest.raises(UnknownEntityError) as exc_info:
            parse_url("invalid-url")

        assert exc_info.value.path == "invalid-url"

    def test_url_without_entity(self):
        """Тест: URL без /<сущность>/list/"""
        with pytest.raises(UnknownEntityError) as exc_info:
            parse_url(f"{BASE}/settings/")

        assert exc_info.value.path == "/settings/"

    def test_unbalanced_ipv6_host(self):
        """Тест: синтаксически неверный URL"""
        with pytest.raises(InvalidURLError) as exc_info:
            parse_url("http://[::1/leads/list/")

        assert exc_info.value.raw_url == "http://[::1/leads/list/"

    def test_bad_percent_escape(self):
        """Тест: неверная %-последовательность в запросе"""
        with pytest.raises(InvalidURLError):
            parse_url(f"{BASE}/leads/list/?filter[name]=%zz")

    def test_control_characters(self):
        """Тест: управляющие символы в URL"""
        with pytest.raises(InvalidURLError):
            parse_url(f"{BASE}/leads/list/\n?filter[name]=Test")

    @pytest.mark.parametrize("url", [
        f"{BASE}:abc/leads/list/",
        f"{BASE}:99999/leads/list/",
        "https://exa mple.amocrm.ru/leads/list/",
        "https://example.amocrm.ru<>/leads/list/",
    ])
    def test_invalid_authority(self, url):
        """Тест: нечисловой порт или недопустимые символы в хосте"""
        with pytest.raises(InvalidURLError):
            parse_url(url)

    def test_numeric_port_accepted(self):
        result = parse_url(f"{BASE}:8443/leads/list/")

        assert result.entity_type == "leads"

    def test_errors_are_value_errors(self):
        """Тест: все ошибки разбора наследуются от ParseError и ValueError"""
        with pytest.raises(ParseError):
            parse_url("invalid-url")
        with pytest.raises(ValueError):
            parse_url("http://[::1")


class TestExtractEntityType:
    """Тесты для extract_entity_type"""

    @pytest.mark.parametrize("path, expected", [
        ("/leads/list/", "leads"),
        ("/contacts/list/", "contacts"),
        ("/companies/list/", "companies"),
        ("/customers/list", "customers"),
        ("/leads/list/?filter[pipeline_id]=3898873", "leads"),
        ("/some/invalid/path", ""),
        ("", ""),
    ])
    def test_extract(self, path, expected):
        assert extract_entity_type(path) == expected

    def test_first_list_route_wins(self):
        """Тест: при нескольких маршрутах берется первый"""
        assert extract_entity_type("/contacts/list/leads/list/") == "contacts"


class TestEntityTypeMap:
    """Тесты для таблицы сущностей"""

    def test_known_entities(self):
        assert set(ENTITY_TYPE_MAP) == {
            "leads", "contacts", "customers", "companies", "catalogs", "tasks"
        }

    def test_map_is_read_only(self):
        with pytest.raises(TypeError):
            ENTITY_TYPE_MAP["deals"] = "leads"


class TestFilterDescriptor:
    """Тесты для FilterDescriptor"""

    def test_immutable(self):
        descriptor = FilterDescriptor(entity_type="leads")

        with pytest.raises(AttributeError):
            descriptor.page = "2"

    def test_equality_with_plain_dict_filters(self):
        """Тест: словарь фильтров оборачивается, равенство сохраняется"""
        first = FilterDescriptor(entity_type="leads", filters={"filter[a]": "1"})
        second = FilterDescriptor(entity_type="leads", filters={"filter[a]": "1"})

        assert first == second
        assert first.page == "1"
        assert first.limit == "50"

    def test_hashable(self):
        """Тест: дескриптор с фильтрами хешируется, равные дают равный хеш"""
        url = f"{BASE}/leads/list/?filter[name]=Test&filter[status][]=1"
        first = parse_url(url)
        second = parse_url(url)

        assert hash(first) == hash(second)
        assert len({first, second}) == 1
