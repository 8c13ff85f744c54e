"""Unit tests for scope chain resolution and organization paths."""

import pytest

from scopeguard.core.context import RequestContext
from scopeguard.core.exceptions import NotFoundError, ValidationError
from scopeguard.repositories.organization import path_prefixes
from scopeguard.schemas.organization import SubsidiaryCreate
from scopeguard.services.organization import OrganizationService
from scopeguard.services.scope import ScopeResolver

pytestmark = pytest.mark.asyncio


async def test_path_prefixes():
    assert path_prefixes("/JP/TOKYO/AIKO/") == ["/JP/", "/JP/TOKYO/", "/JP/TOKYO/AIKO/"]
    assert path_prefixes("/") == []


class TestChain:
    async def test_tenant_chain(self, session, context):
        chain = await ScopeResolver(session, context.tenant_id).chain("tenant")
        assert [(r.type, r.id) for r in chain] == [("tenant", None)]

    async def test_tenant_ignores_scope_id(self, session, context):
        chain = await ScopeResolver(session, context.tenant_id).chain("tenant", "whatever")
        assert [r.type for r in chain] == ["tenant"]

    async def test_nested_subsidiary_chain_is_root_first(self, session, context, org):
        chain = await ScopeResolver(session, context.tenant_id).chain("subsidiary", org.tokyo.id)
        assert [(r.type, r.id) for r in chain] == [
            ("tenant", None),
            ("subsidiary", org.jp.id),
            ("subsidiary", org.tokyo.id),
        ]
        assert [r.name for r in chain] == [None, "Japan", "Tokyo"]

    async def test_talent_chain_includes_every_ancestor(self, session, context, org):
        chain = await ScopeResolver(session, context.tenant_id).chain("talent", org.aiko.id)
        assert [r.id for r in chain] == [None, org.jp.id, org.tokyo.id, org.aiko.id]
        assert chain[-1].label == "talent:AIKO"

    async def test_talent_without_subsidiary(self, session, context, org):
        chain = await ScopeResolver(session, context.tenant_id).chain("talent", org.solo.id)
        assert [r.type for r in chain] == ["tenant", "talent"]

    async def test_sibling_subsidiary_is_not_an_ancestor(self, session, context, org):
        chain = await ScopeResolver(session, context.tenant_id).chain("subsidiary", org.kr.id)
        assert org.jp.id not in [r.id for r in chain]

    async def test_unknown_id_raises_not_found(self, session, context):
        with pytest.raises(NotFoundError):
            await ScopeResolver(session, context.tenant_id).chain("talent", "missing")

    async def test_missing_id_raises_validation(self, session, context):
        with pytest.raises(ValidationError):
            await ScopeResolver(session, context.tenant_id).chain("subsidiary")

    async def test_unknown_scope_type(self, session, context):
        with pytest.raises(ValidationError):
            await ScopeResolver(session, context.tenant_id).chain("planet", "x")

    async def test_other_tenant_cannot_resolve(self, session, org):
        with pytest.raises(NotFoundError):
            await ScopeResolver(session, "tenant-b").chain("subsidiary", org.jp.id)


class TestOrganizationPaths:
    async def test_paths_and_depth(self, org):
        assert org.jp.path == "/JP/"
        assert org.jp.depth == 1
        assert org.tokyo.path == "/JP/TOKYO/"
        assert org.tokyo.depth == 2
        assert org.aiko.path == "/JP/TOKYO/AIKO/"
        assert org.solo.path == "/SOLO/"

    async def test_duplicate_code_rejected(self, session, context, org):
        with pytest.raises(ValidationError) as exc_info:
            await OrganizationService(session, context).create_subsidiary(
                SubsidiaryCreate(code="JP", name_en="Again")
            )
        assert exc_info.value.code == "CODE_ALREADY_EXISTS"

    async def test_same_code_allowed_in_another_tenant(self, session, org):
        other = OrganizationService(session, RequestContext(tenant_id="tenant-b"))
        subsidiary = await other.create_subsidiary(SubsidiaryCreate(code="JP", name_en="Japan B"))
        assert subsidiary.tenant_id == "tenant-b"

    async def test_max_depth_enforced(self, session, context, monkeypatch):
        from scopeguard.core.config import settings

        monkeypatch.setattr(settings, "subsidiary_max_depth", 2)
        svc = OrganizationService(session, context)
        root = await svc.create_subsidiary(SubsidiaryCreate(code="R", name_en="Root"))
        child = await svc.create_subsidiary(
            SubsidiaryCreate(code="C", name_en="Child", parent_id=root.id)
        )
        with pytest.raises(ValidationError) as exc_info:
            await svc.create_subsidiary(
                SubsidiaryCreate(code="G", name_en="Grandchild", parent_id=child.id)
            )
        assert exc_info.value.code == "MAX_DEPTH_EXCEEDED"

    async def test_unknown_parent_raises_not_found(self, session, context):
        with pytest.raises(NotFoundError):
            await OrganizationService(session, context).create_subsidiary(
                SubsidiaryCreate(code="X", name_en="X", parent_id="nope")
            )
