"""
Tests for the Shopify client and its catalog/mutation collaborators.
"""

import asyncio
import json

import httpx
import pytest

from price_editor.shopify import (
    ShopifyAuthError,
    ShopifyClient,
    ShopifyClientError,
    ShopifyPriceMutator,
    ShopifyTransportError,
    fetch_all_products,
    fetch_products_by_ids,
    fetch_products_page,
    resolve_first_variant,
)


def make_client(handler, max_retries=3):
    client = ShopifyClient(
        "https://test-store.myshopify.com/",
        "shpat_test",
        max_retries=max_retries,
        transport=httpx.MockTransport(handler),
    )
    client.BASE_RETRY_DELAY = 0
    return client


def graphql_response(data, **extra):
    return httpx.Response(200, json={"data": data, **extra})


def run(coro_fn, handler, **kwargs):
    """Run coro_fn(client) against a mock transport and close the client."""
    async def go():
        async with make_client(handler, **kwargs) as client:
            return await coro_fn(client)
    return asyncio.run(go())


def product_node(n, price="10.00"):
    return {
        "id": f"gid://shopify/Product/{n}",
        "title": f"Product {n}",
        "status": "ACTIVE",
        "variants": {"nodes": [{"id": f"gid://shopify/ProductVariant/{n}", "price": price}]},
        "images": {"nodes": []},
    }


class TestShopifyClient:
    """Tests for ShopifyClient.execute."""

    def test_url_and_headers(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["token"] = request.headers["X-Shopify-Access-Token"]
            seen["body"] = json.loads(request.content)
            return graphql_response({"shop": {"name": "Test"}})

        data = run(lambda c: c.execute("query { shop { name } }", {"a": 1}), handler)

        assert data == {"shop": {"name": "Test"}}
        assert seen["url"] == "https://test-store.myshopify.com/admin/api/2025-01/graphql.json"
        assert seen["token"] == "shpat_test"
        assert seen["body"]["variables"] == {"a": 1}

    def test_auth_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(401)

        with pytest.raises(ShopifyAuthError):
            run(lambda c: c.execute("query { shop { name } }"), handler)
        assert len(calls) == 1

    def test_throttled_then_success(self):
        responses = iter([
            httpx.Response(429, headers={"Retry-After": "0"}),
            graphql_response({"ok": True}),
        ])

        data = run(lambda c: c.execute("query { x }"), lambda request: next(responses))

        assert data == {"ok": True}

    def test_network_errors_exhaust_retries(self):
        calls = []

        def handler(request):
            calls.append(1)
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ShopifyTransportError):
            run(lambda c: c.execute("query { x }"), handler, max_retries=3)
        assert len(calls) == 3

    def test_graphql_errors_raise(self):
        def handler(request):
            return httpx.Response(200, json={"errors": [{"message": "Field 'x' doesn't exist"}]})

        with pytest.raises(ShopifyClientError) as exc:
            run(lambda c: c.execute("query { x }"), handler)
        assert "doesn't exist" in str(exc.value)

    def test_server_errors_are_retried(self):
        responses = iter([httpx.Response(502), graphql_response({"ok": True})])

        data = run(lambda c: c.execute("query { x }"), lambda request: next(responses))

        assert data == {"ok": True}

    def test_server_errors_exhaust_retries(self):
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(503)

        with pytest.raises(ShopifyTransportError) as exc:
            run(lambda c: c.execute("query { x }"), handler, max_retries=3)
        assert len(calls) == 3
        assert "503" in str(exc.value)

    def test_client_errors_are_not_retried(self):
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(404)

        with pytest.raises(ShopifyClientError) as exc:
            run(lambda c: c.execute("query { x }"), handler)
        assert not isinstance(exc.value, ShopifyTransportError)
        assert len(calls) == 1
        assert "HTTP 404" in str(exc.value)


class TestCatalogQueries:
    """Tests for catalog reads."""

    def test_page_passes_cursor_as_variable(self):
        seen = {}

        def handler(request):
            seen.update(json.loads(request.content)["variables"])
            return graphql_response({"products": {
                "nodes": [product_node(1)],
                "pageInfo": {"hasNextPage": True, "endCursor": "abc"},
            }})

        page = run(lambda c: fetch_products_page(c, first=500, after="xyz"), handler)

        assert seen == {"first": 250, "after": "xyz"}
        assert page.has_next_page
        assert page.end_cursor == "abc"
        assert page.products[0].variant_id == "gid://shopify/ProductVariant/1"

    def test_fetch_all_follows_cursors(self):
        pages = iter([
            {"nodes": [product_node(1)], "pageInfo": {"hasNextPage": True, "endCursor": "c1"}},
            {"nodes": [product_node(2)], "pageInfo": {"hasNextPage": False, "endCursor": "c2"}},
        ])

        products = run(
            lambda c: fetch_all_products(c, page_size=1),
            lambda request: graphql_response({"products": next(pages)}),
        )

        assert [p.id for p in products] == ["gid://shopify/Product/1", "gid://shopify/Product/2"]

    def test_fetch_by_ids_drops_missing(self):
        def handler(request):
            ids = json.loads(request.content)["variables"]["ids"]
            assert ids == ["gid://shopify/Product/1", "gid://shopify/Product/404"]
            return graphql_response({"nodes": [product_node(1), None]})

        products = run(
            lambda c: fetch_products_by_ids(c, ["gid://shopify/Product/1", "gid://shopify/Product/404"]),
            handler,
        )

        assert [p.id for p in products] == ["gid://shopify/Product/1"]

    def test_fetch_by_ids_sends_each_id_once(self):
        seen = []

        def handler(request):
            ids = json.loads(request.content)["variables"]["ids"]
            seen.append(ids)
            return graphql_response({"nodes": [product_node(pid.rsplit("/", 1)[1]) for pid in ids]})

        products = run(
            lambda c: fetch_products_by_ids(c, [
                "gid://shopify/Product/1",
                "gid://shopify/Product/2",
                "gid://shopify/Product/1",
            ]),
            handler,
        )

        assert seen == [["gid://shopify/Product/1", "gid://shopify/Product/2"]]
        assert [p.id for p in products] == ["gid://shopify/Product/1", "gid://shopify/Product/2"]

    def test_resolve_first_variant_missing_product(self):
        variant = run(
            lambda c: resolve_first_variant(c, "gid://shopify/Product/404"),
            lambda request: graphql_response({"product": None}),
        )

        assert variant is None


class TestShopifyPriceMutator:
    """Tests for the price mutation collaborator."""

    def test_success(self):
        seen = {}

        def handler(request):
            seen.update(json.loads(request.content)["variables"])
            return graphql_response({"productVariantsBulkUpdate": {
                "productVariants": [{"id": "gid://shopify/ProductVariant/1", "price": "21.99"}],
                "userErrors": [],
            }})

        result = run(
            lambda c: ShopifyPriceMutator(c)(
                "gid://shopify/ProductVariant/1", "21.99", "gid://shopify/Product/1"
            ),
            handler,
        )

        assert result.ok
        assert result.price == "21.99"
        assert seen == {
            "productId": "gid://shopify/Product/1",
            "variants": [{"id": "gid://shopify/ProductVariant/1", "price": "21.99"}],
        }

    def test_user_errors(self):
        def handler(request):
            return graphql_response({"productVariantsBulkUpdate": {
                "productVariants": None,
                "userErrors": [{"field": ["variants", "0", "price"], "message": "Price is invalid"}],
            }})

        result = run(
            lambda c: ShopifyPriceMutator(c)("v1", "-1.00", "p1"),
            handler,
        )

        assert not result.ok
        assert result.errors == ["Price is invalid"]

    def test_resolves_product_when_missing(self):
        bodies = []

        def handler(request):
            body = json.loads(request.content)
            bodies.append(body)
            if "productVariant(" in body["query"]:
                return graphql_response({"productVariant": {
                    "id": "v1", "product": {"id": "gid://shopify/Product/5"}
                }})
            return graphql_response({"productVariantsBulkUpdate": {
                "productVariants": [{"id": "v1", "price": "3.00"}],
                "userErrors": [],
            }})

        result = run(lambda c: ShopifyPriceMutator(c)("v1", "3.00"), handler)

        assert result.ok
        assert bodies[1]["variables"]["productId"] == "gid://shopify/Product/5"
