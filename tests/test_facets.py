"""
Tests for the facet catalog.
"""
import pytest

from adgen import facets
from adgen.exceptions import CompositionError
from adgen.pipeline.models import SceneType


class TestCatalogLookup:
    """Lookups by id."""

    def test_known_ids_resolve(self):
        assert facets.get_persona("indonesian_man_fair")["id"] == "indonesian_man_fair"
        assert "kitchen" in facets.get_background("minimalist_kitchen")
        assert len(facets.get_niche("fashion")["actions"]) == 4
        assert facets.get_style("cinematic")["camera"].startswith("smooth dolly")

    @pytest.mark.parametrize("getter,catalog", [
        (facets.get_persona, "persona"),
        (facets.get_background, "background"),
        (facets.get_niche, "niche"),
        (facets.get_style, "style preset"),
        (facets.get_scene, "scene type"),
    ])
    def test_unknown_id_raises_composition_error(self, getter, catalog):
        with pytest.raises(CompositionError) as exc_info:
            getter("ghost")

        assert exc_info.value.catalog == catalog
        assert exc_info.value.key == "ghost"
        assert "'ghost'" in str(exc_info.value)

    def test_scene_accepts_enum_or_value(self):
        assert facets.get_scene("CTA") is facets.get_scene(SceneType.CTA)


class TestCatalogContents:
    """Shape of the built-in catalogs."""

    def test_every_persona_carries_consistency_lock(self):
        for persona in facets.PERSONAS.values():
            assert facets.CONSISTENCY_LOCK in persona["consistency"]

    def test_every_scene_is_four_seconds(self):
        assert {scene["duration"] for scene in facets.SCENES.values()} == {4}

    def test_list_catalog(self):
        catalog = facets.list_catalog()

        assert catalog["scene_types"] == ["HOOK", "BENEFIT", "DEMO", "CTA"]
        assert catalog["niches"] == ["herbal", "fashion", "elektronik"]
        assert catalog["styles"] == ["vlog", "studio", "cinematic"]
        assert len(catalog["personas"]) == 3
        assert len(catalog["backgrounds"]) == 5
