"""Tests for conference_companion.sponsors -- sponsor group assembly."""

import httpx
import pytest
from payloads import make_config, sponsor_post

from conference_companion.client import CMSClient
from conference_companion.exceptions import CMSError, CMSFetchError
from conference_companion.sponsors import fetch_sponsor_groups


def _group_post(slug, refs, post_id=1):
    return {"id": post_id, "slug": slug, "acf": {"select_sponsors": refs}}


# ---------------------------------------------------------------------------
# fetch_sponsor_groups()
# ---------------------------------------------------------------------------


class TestFetchSponsorGroups:
    """Tests for fetch_sponsor_groups()."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_groups_in_configured_order_with_sponsors_in_field_order(self, client, fake_cms):
        fake_cms.add_collection(
            "sponsorships",
            [
                _group_post("gold", [{"ID": 2, "post_type": "casinos"}]),
                _group_post(
                    "platinum",
                    [
                        {"ID": 5, "post_type": "tribal_offices"},
                        {"ID": 1, "post_type": "casinos"},
                        {"ID": 5, "post_type": "tribal_offices"},
                    ],
                ),
            ],
        )
        fake_cms.add_collection("casinos", [sponsor_post(1, "Casino One"), sponsor_post(2, "Casino Two")])
        fake_cms.add_collection("tribal_offices", [sponsor_post(5, "Tribe Five")])

        groups = await fetch_sponsor_groups(client)

        assert [g.label for g in groups] == ["Platinum", "Gold"]
        assert [s.name for s in groups[0].sponsors] == ["Tribe Five", "Casino One"]
        assert [s.name for s in groups[1].sponsors] == ["Casino Two"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_group_post_is_left_out(self, client, fake_cms):
        fake_cms.add_collection("sponsorships", [_group_post("gold", [{"ID": 2, "post_type": "casinos"}])])
        fake_cms.add_collection("casinos", [sponsor_post(2, "Casino Two")])

        groups = await fetch_sponsor_groups(client)

        assert [g.label for g in groups] == ["Gold"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("refs", [[], None, False, ""])
    async def test_empty_relationship_field_is_left_out(self, client, fake_cms, refs):
        fake_cms.add_collection(
            "sponsorships",
            [_group_post("platinum", refs), _group_post("gold", [{"ID": 2, "post_type": "casinos"}])],
        )
        fake_cms.add_collection("casinos", [sponsor_post(2, "Casino Two")])

        groups = await fetch_sponsor_groups(client)

        assert [g.label for g in groups] == ["Gold"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_group_whose_sponsors_all_fail_is_left_out(self, client, fake_cms):
        fake_cms.add_collection(
            "sponsorships",
            [
                _group_post("platinum", [{"ID": 1, "post_type": "casinos"}]),
                _group_post("gold", [{"ID": 5, "post_type": "tribal_offices"}]),
            ],
        )
        fake_cms.add_error("casinos", 500)
        fake_cms.add_collection("tribal_offices", [sponsor_post(5, "Tribe Five")])

        groups = await fetch_sponsor_groups(client)

        assert [g.label for g in groups] == ["Gold"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_untyped_references_are_probed(self, client, fake_cms):
        fake_cms.add_collection("sponsorships", [_group_post("gold", [9])])
        fake_cms.add_collection("associate_members", [sponsor_post(9, "Member Nine")])
        fake_cms.add_collection("casinos", [])
        fake_cms.add_collection("tribal_offices", [])

        groups = await fetch_sponsor_groups(client)

        assert [(s.type, s.name) for s in groups[0].sponsors] == [("associate_members", "Member Nine")]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_one_failed_lookup_skips_only_that_group(self, client, fake_cms):
        def by_slug(request):
            if request.url.params["slug"] == "platinum":
                return httpx.Response(500, json={"code": "error"})
            return httpx.Response(200, json=[_group_post("gold", [{"ID": 2, "post_type": "casinos"}])])

        fake_cms.add_route("sponsorships", by_slug)
        fake_cms.add_collection("casinos", [sponsor_post(2, "Casino Two")])

        groups = await fetch_sponsor_groups(client)

        assert [g.label for g in groups] == ["Gold"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_group_answering_html_skips_only_that_group(self, client, fake_cms):
        def by_slug(request):
            if request.url.params["slug"] == "gold":
                return httpx.Response(200, text="<html>PHP notice</html>")
            return httpx.Response(200, json=[_group_post("platinum", [{"ID": 2, "post_type": "casinos"}])])

        fake_cms.add_route("sponsorships", by_slug)
        fake_cms.add_collection("casinos", [sponsor_post(2, "Casino Two")])

        groups = await fetch_sponsor_groups(client)

        assert [g.label for g in groups] == ["Platinum"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_every_lookup_failing_raises(self, client, fake_cms):
        fake_cms.add_error("sponsorships", 503)

        with pytest.raises(CMSFetchError) as exc_info:
            await fetch_sponsor_groups(client)

        assert isinstance(exc_info.value, CMSError)
        assert exc_info.value.status_code == 503

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_configured_groups(self, fake_cms):
        client = CMSClient(make_config(sponsor_groups=[]), transport=httpx.MockTransport(fake_cms.handle))

        assert await fetch_sponsor_groups(client) == []
        assert fake_cms.requests == []
