"""Static participant roster, loaded once from configuration"""

from league.utils.errors import UnknownParticipantError

DEFAULT_THEME = {"color": "gray", "avatar": ""}


class Roster:
    def __init__(self, names, themes=None):
        self.names = list(dict.fromkeys(names))
        self.themes = themes or {}
        self._lookup = {name.lower(): name for name in self.names}

    @classmethod
    def from_config(cls, app_config):
        return cls(
            app_config.get("LEAGUE_ROSTER") or [],
            app_config.get("PLAYER_THEMES") or {},
        )

    def __iter__(self):
        return iter(self.names)

    def __contains__(self, name):
        return str(name).lower() in self._lookup

    def resolve(self, name):
        """Return the roster spelling of a participant name"""
        try:
            return self._lookup[str(name).strip().lower()]
        except KeyError:
            raise UnknownParticipantError(f"Unknown participant: {name}") from None

    def theme(self, name):
        return self.themes.get(name, DEFAULT_THEME)

    def to_dict(self):
        return [{"name": name, "theme": self.theme(name)} for name in self.names]
