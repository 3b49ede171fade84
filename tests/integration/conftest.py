"""Fixtures for integration tests.

Provides small hero-catalogue components built on the real mock network
layer and timer primitives, wrapped in fixtures on the test clock.
"""

import pytest

from quiesce.fakes import timers

HEROES = [
    {"id": 12, "name": "Dr. Nice"},
    {"id": 13, "name": "Bombasto"},
    {"id": 14, "name": "Celeritas"},
    {"id": 15, "name": "Magneta"},
]


class HeroesComponent:
    """Lists heroes and lets the user add or delete them."""

    def __init__(self, http):
        self.http = http
        self.heroes = []
        self.messages = []

    def on_init(self):
        self.http.get("api/heroes", on_success=self._set_heroes, on_error=self._log_error)

    def add(self, name):
        self.http.post(
            "api/heroes",
            body={"name": name.strip()},
            on_success=self.heroes.append,
            on_error=self._log_error,
        )

    def delete(self, hero):
        self.heroes = [h for h in self.heroes if h["id"] != hero["id"]]
        self.http.delete(f"api/heroes/{hero['id']}", on_error=self._log_error)

    def _set_heroes(self, heroes):
        self.heroes = list(heroes)

    def _log_error(self, error):
        self.messages.append(f"HeroService: failed with {error.status}")


class HeroDetailComponent:
    """Loads one hero, then its team mates; saving has no error handler."""

    def __init__(self, http, hero_id):
        self.http = http
        self.hero_id = hero_id
        self.hero = None
        self.team = []
        self.saved = False

    def on_init(self):
        self.http.get(f"api/heroes/{self.hero_id}", on_success=self._set_hero)

    def save(self, name):
        self.http.put(
            "api/heroes",
            body={**self.hero, "name": name},
            on_success=self._mark_saved,
        )

    def _set_hero(self, hero):
        self.hero = hero
        self.http.get("api/teams", params={"hero": hero["id"]}, on_success=self._set_team)

    def _set_team(self, team):
        self.team = team

    def _mark_saved(self, _):
        self.saved = True


class HeroSearchComponent:
    """Debounced search that cancels superseded requests."""

    DEBOUNCE_MS = 300

    def __init__(self, http):
        self.http = http
        self.results = []
        self._pending_term = None
        self._debounce = None
        self._in_flight = None

    def search(self, term):
        timers.clear_timer(self._debounce)
        self._pending_term = term
        self._debounce = timers.set_timeout(self._run_search, self.DEBOUNCE_MS)

    def _run_search(self):
        self._debounce = None
        if self._in_flight is not None:
            self._in_flight.cancel()
        self._in_flight = self.http.get(
            "api/heroes/",
            params={"name": self._pending_term},
            on_success=self._set_results,
        )

    def _set_results(self, heroes):
        self._in_flight = None
        self.results = heroes


class DashboardComponent:
    """Shows top heroes, optionally refreshing them on a repeating timer."""

    REFRESH_MS = 5000

    def __init__(self, http, auto_refresh=False):
        self.http = http
        self.auto_refresh = auto_refresh
        self.top_heroes = []
        self.loads = 0

    def on_init(self):
        self._load()
        if self.auto_refresh:
            timers.set_interval(self._load, self.REFRESH_MS)

    def _load(self):
        self.http.get("api/heroes", on_success=self._set_top)

    def _set_top(self, heroes):
        self.loads += 1
        self.top_heroes = heroes[1:5]


@pytest.fixture
def heroes():
    """Copy of the hero catalogue served by the fake backend."""
    return [dict(hero) for hero in HEROES]


@pytest.fixture
def heroes_fixture(http_client, make_fixture):
    return make_fixture(HeroesComponent(http_client))


@pytest.fixture
def hero_detail_fixture(http_client, make_fixture):
    return make_fixture(HeroDetailComponent(http_client, hero_id=15))


@pytest.fixture
def search_fixture(http_client, make_fixture):
    return make_fixture(HeroSearchComponent(http_client))


@pytest.fixture
def dashboard_fixture(http_client, make_fixture):
    return make_fixture(DashboardComponent(http_client))


@pytest.fixture
def polling_dashboard_fixture(http_client, make_fixture):
    return make_fixture(DashboardComponent(http_client, auto_refresh=True))
