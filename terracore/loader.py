import threading
import logging

from .errors import LoadError
from .world import decode

logger = logging.getLogger("TerraCore.loader")


class WorldLoader:
    """Decodes a world on a background thread.

    `on_status(message)` fires as decoding progresses (once per tile
    column during the tile section). Exactly one of `on_loaded(world)` or
    `on_error(error)` fires at the end.
    """

    def __init__(self, world_path, player_path=None, info=None,
                 on_status=None, on_loaded=None, on_error=None):
        self.world_path = world_path
        self.player_path = player_path
        self.info = info
        self.on_status = on_status
        self.on_loaded = on_loaded
        self.on_error = on_error
        self.cancel_event = threading.Event()
        self.thread = None
        self.world = None
        self.error = None

    def start(self):
        if self.thread is not None:
            raise RuntimeError("WorldLoader already started")
        self.thread = threading.Thread(target=self.run, daemon=True)
        self.thread.start()
        return self

    def cancel(self):
        self.cancel_event.set()

    def join(self, timeout=None):
        if self.thread is not None:
            self.thread.join(timeout)
        return self.world

    def run(self):
        try:
            self.world = decode(self.world_path, self.player_path, info=self.info,
                                on_status=self.on_status, cancel_event=self.cancel_event)
        except Exception as e:
            if isinstance(e, LoadError):
                error = e
            else:
                error = LoadError(f"Unexpected {type(e).__name__}: {e}")
                error.__cause__ = e
            self.world = None
            self.error = error
            logger.error(f"Loading {self.world_path} failed: {error}")
            if self.on_error:
                self.on_error(error)
            return
        if self.on_loaded:
            self.on_loaded(self.world)
