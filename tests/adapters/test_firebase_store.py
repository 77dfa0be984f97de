from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

import httpx
import pytest

from unionwatch.adapters.firebase import (
    AppSettings,
    FirebaseClient,
    FirebaseSettingsStore,
    FirebaseUnionStore,
    NewsSource,
    node_path,
)
from unionwatch.config import FirebaseConfig, ResilienceConfig
from unionwatch.domain.errors import UpstreamError
from unionwatch.domain.ingestion import refresh_all
from unionwatch.domain.model import CustomField, FieldRegistry, FieldSection, FieldType
from unionwatch.domain.reconciliation import OptimisticUnionView

from tests.helpers.http import make_client_factory
from tests.helpers.unions import (
    FakeIntelligence,
    assert_leftovers_kept,
    document_with_leftovers,
    make_event,
    make_union,
)

DB_URL = "https://unionwatch-test.firebaseio.com"


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> FirebaseClient:
    config = FirebaseConfig(
        db_url=DB_URL,
        secret="db-secret",
        collection="sindicatos",
        resilience=ResilienceConfig(name="firebase", base_url=DB_URL + "/"),
    )
    return FirebaseClient(config=config, client_factory=make_client_factory(handler))


def _stored(slug: str, name: str) -> dict[str, object]:
    return {
        "nombre": name,
        "slug": slug,
        "datosBasicos": {"sedePrincipal": "Sede", "sitioWeb": ""},
        "acciones": {"k1": {"titulo": "Paro", "fecha": "2025-03-01", "tipo": "medida-fuerza"}},
    }


def test_node_path_escapes_segments() -> None:
    assert node_path("sindicatos", "a/b c") == "sindicatos/a%2Fb%20c.json"
    assert node_path("config") == "config.json"


def test_get_all_unions_reads_collection_with_auth() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json={"sx": _stored("sx", "Sindicato X"), "uom": _stored("uom", "UOM")}
        )

    store = FirebaseUnionStore(client=_client(handler))

    unions = asyncio.run(store.get_all_unions())

    assert [union.slug for union in unions] == ["sx", "uom"]
    assert list(unions[0].events) == ["k1"]
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/sindicatos.json"
    assert request.url.params["auth"] == "db-secret"


def test_get_all_unions_handles_empty_and_array_collections() -> None:
    answers = iter(
        [
            httpx.Response(200, content=b"null"),
            httpx.Response(200, json=[None, _stored("sx", "Sindicato X"), "basura"]),
        ]
    )
    store = FirebaseUnionStore(client=_client(lambda _request: next(answers)))

    assert asyncio.run(store.get_all_unions()) == []
    assert [union.slug for union in asyncio.run(store.get_all_unions())] == ["sx"]


def test_get_all_unions_rejects_unexpected_payload() -> None:
    store = FirebaseUnionStore(client=_client(lambda _request: httpx.Response(200, json=42)))

    with pytest.raises(UpstreamError, match="Unexpected"):
        asyncio.run(store.get_all_unions())


def test_get_all_unions_fills_placeholders_for_partial_documents() -> None:
    store = FirebaseUnionStore(
        client=_client(lambda _request: httpx.Response(200, json={"x": {"acciones": None}}))
    )

    (union,) = asyncio.run(store.get_all_unions())

    assert union.slug == "sin-id"
    assert union.name == "Sindicato Sin Nombre"


def test_put_union_writes_document_under_slug() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=json.loads(request.content))

    store = FirebaseUnionStore(client=_client(handler))
    union = make_union(events={"k1": make_event()})

    asyncio.run(store.put_union(union))

    request = seen[0]
    assert request.method == "PUT"
    assert request.url.path == "/sindicatos/sx.json"
    assert request.url.params["auth"] == "db-secret"
    body = json.loads(request.content)
    assert body["nombre"] == "Sindicato X"
    assert body["acciones"]["k1"]["titulo"] == "Paro General"


def test_delete_union_and_error_status() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "DELETE":
            return httpx.Response(200, content=b"null")
        return httpx.Response(401, json={"error": "Permission denied"})

    store = FirebaseUnionStore(client=_client(handler))

    asyncio.run(store.delete_union("sx"))
    with pytest.raises(UpstreamError, match="Permission denied") as exc:
        asyncio.run(store.put_union(make_union()))

    assert seen[0].url.path == "/sindicatos/sx.json"
    assert exc.value.status_code == 401


def test_get_json_rejects_invalid_body() -> None:
    client = _client(lambda _request: httpx.Response(200, text="not json"))

    with pytest.raises(UpstreamError, match="invalid JSON"):
        asyncio.run(client.get_json("config.json"))


def test_settings_fetch_maps_remote_names() -> None:
    remote = {
        "geminiApiKey": "  ",
        "prompts": {"comision": "Directiva de {{name}}", "linkAnalysis": "", "chatAgent": "Hola"},
        "newsSources": [{"name": "Diario", "url": "https://diario.example/rss"}],
        "customFields": [
            {
                "id": "f1",
                "key": "Cantidad de Afiliados",
                "label": "Afiliados",
                "section": "datosBasicos",
                "type": "number",
            }
        ],
    }
    client = _client(lambda _request: httpx.Response(200, json=remote))

    settings = asyncio.run(FirebaseSettingsStore(client).fetch())

    assert settings is not None
    assert settings.api_key is None
    assert settings.prompts == {"leadership": "Directiva de {{name}}", "chat_agent": "Hola"}
    assert settings.news_sources == (NewsSource(name="Diario", url="https://diario.example/rss"),)
    (custom,) = settings.registry.fields
    assert custom.key == "cantidad_de_afiliados"
    assert custom.section is FieldSection.PROFILE
    assert custom.type is FieldType.NUMBER


def test_settings_fetch_handles_missing_and_invalid_nodes() -> None:
    answers = iter(
        [
            httpx.Response(200, content=b"null"),
            httpx.Response(200, json={"customFields": [{"key": "x", "section": "nowhere"}]}),
        ]
    )
    store = FirebaseSettingsStore(_client(lambda _request: next(answers)))

    assert asyncio.run(store.fetch()) is None
    with pytest.raises(UpstreamError, match="invalid"):
        asyncio.run(store.fetch())


def test_settings_save_writes_remote_names() -> None:
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={})

    settings = AppSettings(
        api_key="k",
        prompts={"agreements": "Paritarias de {{name}}"},
        registry=FieldRegistry(
            fields=(CustomField(key="fundacion", label="Fundación", section=FieldSection.ROOT),)
        ),
    )

    asyncio.run(FirebaseSettingsStore(_client(handler)).save(settings))

    assert seen[0] == {
        "geminiApiKey": "k",
        "prompts": {"paritarias": "Paritarias de {{name}}"},
        "newsSources": [],
        "customFields": [
            {
                "id": "fundacion",
                "key": "fundacion",
                "label": "Fundación",
                "section": "root",
                "type": "text",
            }
        ],
    }


def test_refresh_all_keeps_stored_leftovers() -> None:
    written: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            written.append(json.loads(request.content))
            return httpx.Response(200, content=request.content)
        return httpx.Response(200, json={"sx": document_with_leftovers()})

    view = OptimisticUnionView(FirebaseUnionStore(client=_client(handler)))
    asyncio.run(view.load())
    intelligence = FakeIntelligence(profiles={"Sindicato X": make_union(headquarters="Sede nueva")})

    report = asyncio.run(refresh_all(view, intelligence, cooldown_seconds=0))

    assert report.succeeded == ["sx"]
    (body,) = written
    assert body["datosBasicos"]["sedePrincipal"] == "Sede nueva"  # type: ignore[index]
    assert_leftovers_kept(body)
