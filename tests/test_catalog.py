from station.models import ShowDefinition, PodcastEpisode
from player.catalog import ShowDirectory, EpisodeCatalog


def make_directory():
    return ShowDirectory([
        ShowDefinition(show_id="morning-glory", name="Morning Glory", artwork="https://img/mg.jpg"),
        ShowDefinition(show_id="night-owls", name="Night Owls"),
    ])


def test_find_by_name_is_loose():
    directory = make_directory()
    assert directory.find_by_name("morning").show_id == "morning-glory"
    assert directory.find_by_name("The Morning Glory Show").show_id == "morning-glory"
    assert directory.find_by_name("Night   Owls").show_id == "night-owls"
    assert directory.find_by_name("Jazz Hour") is None
    assert directory.find_by_name("") is None


def test_find_by_name_empty_directory():
    assert ShowDirectory().find_by_name("Morning Glory") is None
    assert not ShowDirectory().has_data


def test_find_by_id():
    assert make_directory().find_by_id("night-owls").name == "Night Owls"
    assert make_directory().find_by_id("night") is None


def make_catalog():
    return EpisodeCatalog([
        PodcastEpisode(id="1", url="u1", title="Pilot", show="Night Owls", description="First one"),
        PodcastEpisode(id="2", url="u2", title="Sunrise", show="Morning Glory"),
        PodcastEpisode(id="3", url="u3", title="Encore", show="night owls", description="Jazz special"),
    ])


def test_for_show_ignores_case():
    assert [e.id for e in make_catalog().for_show("NIGHT OWLS")] == ["1", "3"]


def test_unique_shows_first_seen_order():
    assert make_catalog().unique_shows() == ["Night Owls", "Morning Glory", "night owls"]


def test_search():
    catalog = make_catalog()
    assert [e.id for e in catalog.search("jazz")] == ["3"]
    assert [e.id for e in catalog.search("MORNING")] == ["2"]
    assert catalog.find_by_id("2").title == "Sunrise"
    assert catalog.find_by_id("9") is None
