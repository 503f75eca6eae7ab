import json
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from kbimporter.civic_api import CivicApiClient, StaticDrugInteractions  # noqa: E402
from kbimporter.errors import CivicApiError, KbImporterError  # noqa: E402

PAGES = {
    None: {
        "pageInfo": {"hasNextPage": True, "endCursor": "MQ"},
        "nodes": [
            {"id": 1, "therapyInteractionType": "COMBINATION"},
            {"id": 2, "therapyInteractionType": None},
        ],
    },
    "MQ": {
        "pageInfo": {"hasNextPage": False, "endCursor": None},
        "nodes": [{"id": 3, "therapyInteractionType": "SUBSTITUTES"}],
    },
}


def test_drug_interaction_map_follows_pagination() -> None:
    requests: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests.append(body["variables"])
        return httpx.Response(200, json={"data": {"evidenceItems": PAGES[body["variables"]["after"]]}})

    with CivicApiClient(page_size=2, transport=httpx.MockTransport(handler)) as client:
        interactions = client.drug_interaction_map()

    assert interactions == {"1": "COMBINATION", "2": "", "3": "SUBSTITUTES"}
    assert requests == [{"first": 2, "after": None}, {"first": 2, "after": "MQ"}]


def test_graphql_error_payload_raises_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"errors": [{"message": "rate limited"}, {"message": "field deprecated"}]},
        )

    with CivicApiClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(CivicApiError, match="rate limited; field deprecated") as excinfo:
            client.drug_interaction_map()

    assert isinstance(excinfo.value, KbImporterError)
    assert not isinstance(excinfo.value, httpx.HTTPError)


def test_http_status_errors_are_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={})

    with CivicApiClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(httpx.HTTPStatusError):
            client.drug_interaction_map()


def test_static_interactions_read_json_export(tmp_path: Path) -> None:
    export = tmp_path / "interactions.json"
    export.write_text(json.dumps({"1": "COMBINATION", "2": None, "3": "SEQUENTIAL"}))

    with StaticDrugInteractions(export) as source:
        interactions = source.drug_interaction_map()

    assert interactions == {"1": "COMBINATION", "2": "", "3": "SEQUENTIAL"}
