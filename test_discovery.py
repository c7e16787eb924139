"""Tests for WebFinger, host-meta, NodeInfo and the actor document."""

import xml.etree.ElementTree as ET

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding

from microblog.core.config import Settings, account_config, build_account_config
from microblog.core.errors import ClientInputError, NotFoundError
from microblog.core.activitypub.webfinger import host_meta_document, resolve_handle
from test_config import LEGACY_DOMAIN, LOCAL_DOMAIN


class TestResolveHandle:
    @pytest.mark.parametrize("domain", [LOCAL_DOMAIN, LEGACY_DOMAIN])
    def test_allowed_domains_resolve_to_actor(self, domain):
        jrd = resolve_handle(f"acct:default@{domain}", account_config)
        assert jrd["subject"] == f"acct:default@{domain}"
        self_link = next(link for link in jrd["links"] if link["rel"] == "self")
        assert self_link["type"] == "application/activity+json"
        assert self_link["href"] == account_config.actor_id
        assert jrd["aliases"] == [account_config.actor_id]

    def test_profile_page_link(self):
        jrd = resolve_handle(f"acct:default@{LOCAL_DOMAIN}", account_config)
        profile = next(link for link in jrd["links"] if link["rel"] == "http://webfinger.net/rel/profile-page")
        assert profile == {"rel": "http://webfinger.net/rel/profile-page", "type": "text/html",
                           "href": f"https://{LOCAL_DOMAIN}"}

    @pytest.mark.parametrize("resource", [None, "", "default@mb.test", "mailto:default@mb.test",
                                          "acct:default", "acct:@mb.test", "acct:a@b@c"])
    def test_invalid_resource(self, resource):
        with pytest.raises(ClientInputError):
            resolve_handle(resource, account_config)

    @pytest.mark.parametrize("resource", ["acct:someone@mb.test", "acct:default@elsewhere.test"])
    def test_unknown_account(self, resource):
        with pytest.raises(NotFoundError):
            resolve_handle(resource, account_config)

    def test_alias_list_is_configurable(self):
        conf = Settings(ACTIVITYPUB_DOMAIN="new.test", ACTIVITYPUB_ALLOWED_DOMAINS=["old.test", "older.test"])
        account = build_account_config(conf)
        assert account.domains == ["new.test", "old.test", "older.test"]
        assert resolve_handle("acct:default@older.test", account)["links"][0]["href"] == "https://new.test/activitypub/actor"


def test_host_meta_document():
    doc = host_meta_document(account_config)
    assert doc.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    root = ET.fromstring(doc.split("\n", 1)[1])
    assert root.tag == "{http://docs.oasis-open.org/ns/xri/xrd-1.0}XRD"
    link = root.find("{http://docs.oasis-open.org/ns/xri/xrd-1.0}Link")
    assert link.get("rel") == "lrdd"
    assert link.get("template") == f"https://{LOCAL_DOMAIN}/.well-known/webfinger?resource={{uri}}"
    assert host_meta_document(account_config) == doc


def test_host_meta_uses_default_xrd_namespace():
    first = host_meta_document(account_config).split("\n", 1)[1]
    assert first.startswith('<XRD xmlns="http://docs.oasis-open.org/ns/xri/xrd-1.0">')
    assert "ns0:" not in first
    # Registered once at import; unrelated serialisation is unaffected between calls
    ET.tostring(ET.Element("{urn:example}Other"), encoding="unicode")
    assert host_meta_document(account_config).split("\n", 1)[1] == first


class TestDiscoveryEndpoints:
    async def test_webfinger(self, client):
        response = await client.get("/.well-known/webfinger", params={"resource": f"acct:default@{LOCAL_DOMAIN}"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/jrd+json")
        assert response.headers["cache-control"] == "public, max-age=3600"
        assert response.json()["links"][0]["href"] == account_config.actor_id

    async def test_webfinger_missing_resource(self, client):
        response = await client.get("/.well-known/webfinger")
        assert response.status_code == 400
        assert response.json() == {"error": "Missing resource parameter"}

    async def test_webfinger_invalid_resource(self, client):
        response = await client.get("/.well-known/webfinger", params={"resource": "https://mb.test/"})
        assert response.status_code == 400
        assert "error" in response.json()

    async def test_webfinger_unknown_user(self, client):
        response = await client.get("/.well-known/webfinger", params={"resource": "acct:bob@mb.test"})
        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    async def test_host_meta(self, client):
        response = await client.get("/.well-known/host-meta")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xrd+xml")
        assert response.headers["cache-control"] == "public, max-age=86400"
        assert "lrdd" in response.text

    async def test_nodeinfo(self, client, posts):
        response = await client.get("/.well-known/nodeinfo")
        assert response.status_code == 200
        href = response.json()["links"][0]["href"]
        assert href == f"https://{LOCAL_DOMAIN}/.well-known/nodeinfo/2.0"

        response = await client.get("/.well-known/nodeinfo/2.0")
        data = response.json()
        assert data["protocols"] == ["activitypub"]
        assert data["usage"]["users"]["total"] == 1
        assert data["usage"]["localPosts"] == len(posts)


class TestActor:
    async def test_unprovisioned_actor_is_server_error(self, client):
        response = await client.get("/activitypub/actor")
        assert response.status_code == 500
        assert response.json() == {"error": "Actor not configured"}

    async def test_actor_document(self, client, provisioned):
        response = await client.get("/activitypub/actor")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/activity+json")
        actor = response.json()
        actor_id = f"https://{LOCAL_DOMAIN}/activitypub/actor"
        assert actor["id"] == actor_id
        assert actor["type"] == "Person"
        assert actor["preferredUsername"] == "default"
        assert actor["name"] == "Test User"
        for name in ("inbox", "outbox", "followers", "following"):
            assert actor[name] == f"https://{LOCAL_DOMAIN}/activitypub/{name}"
        assert actor["publicKey"]["id"] == f"{actor_id}#main-key"
        assert actor["publicKey"]["owner"] == actor_id
        assert "https://w3id.org/security/v1" in actor["@context"]

    async def test_actor_key_verifies_local_signatures(self, client, provisioned):
        actor = (await client.get("/activitypub/actor")).json()
        public_key = serialization.load_pem_public_key(actor["publicKey"]["publicKeyPem"].encode())
        signing_key = await provisioned.get_private_key("default")
        public_key.verify(signing_key.sign(b"hello"), b"hello", padding.PKCS1v15(), hashes.SHA256())

    async def test_webfinger_self_link_matches_actor_id(self, client, provisioned):
        jrd = (await client.get("/.well-known/webfinger",
                                params={"resource": f"acct:default@{LEGACY_DOMAIN}"})).json()
        actor = (await client.get("/activitypub/actor")).json()
        assert jrd["links"][0]["href"] == actor["id"]


async def test_health(client):
    response = await client.get("/api/v1/health/")
    assert response.status_code == 200
    assert response.json()["database"] == "healthy"
