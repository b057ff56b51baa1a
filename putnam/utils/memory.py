# putnam/utils/memory.py
import gc
import os
import sys
import threading
import time
from statistics import mean

import psutil


class MemoryTracker:
    """
    Samples process memory from a background thread while a `with` block runs.

    Usage is in KB above the level measured on entry (USS where the platform
    exposes it, RSS otherwise). `min_usage`, `avg_usage` and `max_usage` are
    filled in on exit.
    """

    def __init__(self, sample_interval=0.001):
        self.process = psutil.Process(os.getpid())
        self.interval = sample_interval
        self.samples = []
        self.min_usage = self.avg_usage = self.max_usage = 0.0
        self._baseline = 0.0
        self._stop = threading.Event()
        self._thread = None

    def usage(self):
        try:
            return self.process.memory_full_info().uss / 1024
        except (AttributeError, psutil.AccessDenied):
            return self.process.memory_info().rss / 1024

    def __enter__(self):
        gc.collect()
        if sys.platform == "win32":
            # trim the working set to drop caches
            import ctypes
            ctypes.windll.kernel32.SetProcessWorkingSetSize(-1, -1)
        time.sleep(0.05)

        self._baseline = self.usage()
        self.samples = []
        self._stop.clear()
        self._thread = threading.Thread(target=self._sample, daemon=True)
        self._thread.start()
        return self

    def _sample(self):
        while not self._stop.is_set():
            self.samples.append(max(0.0, self.usage() - self._baseline))
            self._stop.wait(self.interval)

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
        samples = self.samples or [0.0]
        self.min_usage = min(samples)
        self.avg_usage = mean(samples)
        self.max_usage = max(samples)
