import os
import sys
import json
import glob
import logging

logger = logging.getLogger("TerraCore.storage")


class StorageManager:
    def __init__(self, data_dir=None):
        if data_dir:
            self.data_dir = data_dir
        else:
            self.data_dir = os.path.join(os.getcwd(), "data")

        self.config_file = os.path.join(self.data_dir, "config.json")
        self.map_cache_dir = os.path.join(self.data_dir, "map_cache")
        self.log_file = os.path.join(self.data_dir, "terracore.log")

        self.ensure_directories()
        self.config = self.load_config()

    def ensure_directories(self):
        for d in [self.data_dir, self.map_cache_dir]:
            os.makedirs(d, exist_ok=True)

    def load_config(self):
        default = {
            "worlds_dir": "",
            "players_dir": "",
            "definitions": "",
            "map_cache": self.map_cache_dir,
            "render_unseen": False
        }
        if os.path.exists(self.config_file):
            try:
                with open(self.config_file, 'r') as f:
                    default.update(json.load(f))
            except (OSError, ValueError) as e:
                logger.error(f"Error loading {self.config_file}: {e}")
        return default

    def save_config(self, new_config):
        self.config.update(new_config)
        with open(self.config_file, 'w') as f:
            json.dump(self.config, f, indent=2)
        return {"status": "success"}

    def _candidate_dirs(self, leaf):
        home = os.path.expanduser("~")
        candidates = [
            os.path.join(home, "Documents", "My Games", "Terraria", leaf),
            os.path.join(home, "My Documents", "My Games", "Terraria", leaf),
        ]
        if sys.platform == 'darwin':
            candidates.append(os.path.join(home, "Library", "Application Support", "Terraria", leaf))
        else:
            data_home = os.getenv("XDG_DATA_HOME") or os.path.join(home, ".local", "share")
            candidates.append(os.path.join(data_home, "Terraria", leaf))

        # Steam cloud saves
        steam_roots = [os.path.join(home, ".local", "share", "Steam"), os.path.join(home, ".steam", "steam")]
        if sys.platform == 'win32':
            program_files = os.getenv("ProgramFiles(x86)") or os.getenv("ProgramFiles")
            if program_files:
                steam_roots.append(os.path.join(program_files, "Steam"))
        for root in steam_roots:
            pattern = os.path.join(root, "userdata", "*", "105600", "remote", leaf.lower())
            candidates.extend(sorted(glob.glob(pattern)))
        return candidates

    def try_auto_detect_worlds(self):
        """Attempts to find the Terraria worlds folder in the default places"""
        if self.config.get("worlds_dir") and os.path.isdir(self.config["worlds_dir"]):
            return self.config["worlds_dir"]
        return next((p for p in self._candidate_dirs("Worlds") if os.path.isdir(p)), "")

    def try_auto_detect_players(self):
        if self.config.get("players_dir") and os.path.isdir(self.config["players_dir"]):
            return self.config["players_dir"]
        return next((p for p in self._candidate_dirs("Players") if os.path.isdir(p)), "")

    def list_worlds(self):
        worlds_dir = self.try_auto_detect_worlds()
        if not worlds_dir:
            return []
        files = [f for f in os.listdir(worlds_dir) if f.lower().endswith('.wld')]
        files.sort(key=lambda x: os.path.getmtime(os.path.join(worlds_dir, x)), reverse=True)
        return [os.path.join(worlds_dir, f) for f in files]

    def list_players(self):
        players_dir = self.try_auto_detect_players()
        if not players_dir:
            return []
        return sorted(os.path.join(players_dir, f) for f in os.listdir(players_dir) if f.lower().endswith('.plr'))
