# games/dungeon/metrics.py
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, generate_latest
from prometheus_client.core import GaugeMetricFamily

GAUGES = [
    ("dungeons_active", "Active dungeon count"),
    ("dungeon_monsters_alive", "Alive monsters across all dungeons"),
    ("dungeon_monsters_dead", "Dead monsters across all dungeons"),
    ("dungeon_bosses_pending", "Bosses pending"),
    ("dungeon_bosses_ready", "Bosses ready"),
    ("dungeon_bosses_defeated", "Bosses defeated"),
    ("dungeon_victories", "Dungeons with victory"),
    ("dungeon_defeats", "Dungeons with defeat"),
]


def gauge_values(summaries):
    values = dict.fromkeys((name for name, _ in GAUGES), 0)
    values["dungeons_active"] = len(summaries)
    for summary in summaries:
        values["dungeon_monsters_alive"] += summary["living_monsters"]
        values["dungeon_monsters_dead"] += summary["dead_monsters"]
        values[f"dungeon_bosses_{summary['boss_state']}"] += 1
        if summary["victory"]:
            values["dungeon_victories"] += 1
        if summary["defeated"]:
            values["dungeon_defeats"] += 1
    return values


class SessionCollector:
    """Game state gauges, derived from the session registry on every scrape."""

    def __init__(self, sessions):
        self.sessions = sessions

    def collect(self):
        values = gauge_values(self.sessions.list_sessions())
        for name, help_text in GAUGES:
            yield GaugeMetricFamily(name, help_text, value=values[name])


class DungeonMetrics:
    content_type = CONTENT_TYPE_LATEST

    def __init__(self, sessions):
        # one registry per app so several apps can live in one process
        self.registry = CollectorRegistry()
        self.sessions_created = Counter(
            "dungeon_sessions_created", "Total dungeons created", registry=self.registry
        )
        self.commands_submitted = Counter(
            "dungeon_commands_submitted", "Total commands submitted",
            ["dungeon", "action"], registry=self.registry,
        )
        self.commands_rate_limited = Counter(
            "dungeon_commands_rate_limited", "Total commands rejected by rate limiter",
            registry=self.registry,
        )
        self.http_requests = Counter(
            "dungeon_http_requests", "Total HTTP requests",
            ["method", "path", "status"], registry=self.registry,
        )
        self.registry.register(SessionCollector(sessions))

    def command_submitted(self, namespace, name, action):
        self.commands_submitted.labels(dungeon=f"{namespace}/{name}", action=action or "unknown").inc()

    def render(self) -> bytes:
        return generate_latest(self.registry)
