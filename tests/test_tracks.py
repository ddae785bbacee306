from conftest import CATALOG_XML

from yt_digest.retrieval.schema import CaptionTrack, TrackKind
from yt_digest.retrieval.tracks import parse_track_catalog, select_track


def manual(code, name=""):
    return CaptionTrack(language_code=code, display_name=name, kind=TrackKind.MANUAL)


def auto(code, name=""):
    return CaptionTrack(language_code=code, display_name=name, kind=TrackKind.AUTO_GENERATED)


# Catalog parsing

def test_parse_catalog_in_listing_order():
    tracks = parse_track_catalog(CATALOG_XML)

    assert [t.language_code for t in tracks] == ["de", "en", "en"]
    assert tracks[0].display_name == "German"
    assert tracks[1].display_name == "English"
    assert tracks[1].kind is TrackKind.UNSPECIFIED
    assert not tracks[1].is_auto_generated
    assert tracks[2].kind is TrackKind.AUTO_GENERATED
    assert tracks[2].is_auto_generated


def test_parse_catalog_decodes_names_and_single_quotes():
    raw = "<track lang_code='fr' name='Fran&#231;ais &amp; co'/>"
    tracks = parse_track_catalog(raw)
    assert tracks == [CaptionTrack(language_code="fr", display_name="Français & co")]


def test_parse_catalog_skips_tracks_without_language():
    raw = '<track name="Nothing"/><track lang_code="" name="Empty"/><track lang_code="es" name="Spanish"/>'
    assert [t.language_code for t in parse_track_catalog(raw)] == ["es"]


def test_parse_catalog_alternate_shape():
    raw = '<list><entry lang="pt" id="1" name="Portuguese"/><entry lang="it" name="Italian"/></list>'
    tracks = parse_track_catalog(raw)
    assert [(t.language_code, t.display_name) for t in tracks] == [("pt", "Portuguese"), ("it", "Italian")]


def test_parse_catalog_empty_or_garbage():
    assert parse_track_catalog("") == []
    assert parse_track_catalog(None) == []
    assert parse_track_catalog("<html>Service unavailable</html>") == []


def test_auto_generated_markers():
    assert CaptionTrack(language_code="en", display_name="English (auto-generated)").is_auto_generated
    assert CaptionTrack(language_code="en", display_name="Automatic captions").is_auto_generated
    prefixed = CaptionTrack(language_code="a.en")
    assert prefixed.is_auto_generated
    assert prefixed.base_language == "en"
    assert not CaptionTrack(language_code="en", display_name="English").is_auto_generated


# Selection

def test_manual_preferred_beats_auto_preferred():
    tracks = [auto("en"), manual("en", "English")]
    assert select_track(tracks, "en") is tracks[1]


def test_catalog_selection_for_several_preferences():
    tracks = parse_track_catalog(CATALOG_XML)
    assert select_track(tracks, "en") is tracks[1]
    assert select_track(tracks, "de") is tracks[0]
    assert select_track(tracks, "fr") is tracks[1]
    assert select_track(tracks, None) is tracks[1]


def test_manual_english_when_preference_missing():
    tracks = [manual("ja"), auto("fr"), manual("en-GB")]
    assert select_track(tracks, "fr") is tracks[2]


def test_auto_preferred_when_no_manual_match():
    tracks = [manual("ja"), auto("en"), auto("fr")]
    assert select_track(tracks, "fr") is tracks[2]
    assert select_track(tracks, "en") is tracks[1]
    assert select_track([manual("ja"), auto("a.fr")], "fr").language_code == "a.fr"


def test_english_preference_skips_manual_family_rule():
    # rule 2 only applies when the preference is outside the fallback family
    tracks = [manual("en-GB"), auto("en-US")]
    assert select_track(tracks, "en-US") is tracks[1]


def test_auto_english_fallback():
    tracks = [manual("ja"), auto("de"), auto("en")]
    assert select_track(tracks, "ko") is tracks[2]


def test_first_track_as_last_resort():
    tracks = [manual("ja"), auto("ko")]
    assert select_track(tracks, "fr") is tracks[0]


def test_case_insensitive_and_regional_variant():
    tracks = [manual("pt-BR"), manual("EN")]
    assert select_track(tracks, "en") is tracks[1]
    assert select_track(tracks, "pt") is tracks[0]
    assert select_track([manual("pt-BR"), manual("pt")], "pt").language_code == "pt"


def test_regional_english_preference_accepts_base_manual_track():
    tracks = [manual("de"), manual("en")]
    assert select_track(tracks, "en-US") is tracks[1]
    assert select_track([manual("de"), auto("en")], "en-GB").language_code == "en"


def test_single_non_english_manual_track_with_english_preference():
    tracks = [manual("de")]
    assert select_track(tracks, "en") is tracks[0]


def test_custom_fallback_languages():
    tracks = [manual("en"), manual("es")]
    assert select_track(tracks, "ja", fallback_languages=("es",)) is tracks[1]


def test_empty_catalog_selects_nothing():
    assert select_track([], "en") is None


def test_selection_is_deterministic():
    tracks = parse_track_catalog(CATALOG_XML)
    picks = {select_track(tracks, "it").language_code for _ in range(5)}
    assert picks == {"en"}
