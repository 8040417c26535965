from pydantic import Field

from wwsvc.common.resources import ListResponse, WebwareResource, list_response_model


class Article(WebwareResource):
    FUNCTION = "ARTIKEL"

    number: str = Field(alias="ART_1_25")
    name: str = Field(alias="ART_6_40")


class Customer(WebwareResource):
    FUNCTION = "KUNDE"
    VERSION = 2
    LIST_NAME = "KUNDENLISTE"

    number: str = Field(alias="KUN_1_10")


def test_resource_contract_defaults() -> None:
    assert Article.function_name() == "ARTIKEL.GET"
    assert Article.list_name() == "ARTIKELLISTE"
    assert Article.container_name() == "ARTIKEL"
    assert Article.fields() == "ART_1_25,ART_6_40"
    assert Article.VERSION == 1
    assert Article.METHOD == "PUT"


def test_resource_contract_overrides() -> None:
    assert Customer.function_name() == "KUNDE.GET"
    assert Customer.list_name() == "KUNDENLISTE"
    assert Customer.container_name() == "KUNDE"
    assert Customer.VERSION == 2  # noqa: PLR2004


def test_resource_response_model_is_cached() -> None:
    assert Article.response_model() is Article.response_model()
    assert issubclass(Article.response_model(), ListResponse)


def test_resource_response_model_parses_list() -> None:
    payload = {
        "COMRESULT": {"STATUS": 200},
        "ARTIKELLISTE": {"ARTIKEL": [{"ART_1_25": "4711", "ART_6_40": "Schraube"}]},
    }

    response = Article.response_model().model_validate(payload)

    assert response.has_list()
    assert response.items() == [Article(number="4711", name="Schraube")]


def test_response_without_container_has_no_list() -> None:
    response = Article.response_model().model_validate({"COMRESULT": {"STATUS": 200}})

    assert not response.has_list()
    assert response.items() == []


def test_empty_container_has_no_list() -> None:
    model = list_response_model("Orders", "AUFTRAGLISTE", "AUFTRAG")
    response = model.model_validate({"COMRESULT": {"STATUS": 200}, "AUFTRAGLISTE": {}})

    assert not response.has_list()


def test_untyped_list_response() -> None:
    model = list_response_model("Orders", "AUFTRAGLISTE", "AUFTRAG")
    response = model.model_validate(
        {"COMRESULT": {"STATUS": 200}, "AUFTRAGLISTE": {"AUFTRAG": [{"AUF_1": "1"}]}}
    )

    assert response.items() == [{"AUF_1": "1"}]
