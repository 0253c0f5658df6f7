"""Tests for the resend cooldown timer"""

import threading

from ..cooldown import ResendCooldown


class TestResendCooldown:

    def test_manual_ticks(self):
        cooldown = ResendCooldown(tick_seconds=3600)
        cooldown.start(3)

        assert cooldown.is_active
        assert cooldown.tick() == 2
        assert cooldown.tick() == 1
        assert cooldown.tick() == 0
        assert not cooldown.is_active
        assert cooldown.tick() == 0
        cooldown.cancel()

    def test_counts_down_in_background(self):
        finished = threading.Event()
        seen = []

        def on_tick(remaining):
            seen.append(remaining)
            if remaining == 0:
                finished.set()

        cooldown = ResendCooldown(tick_seconds=0.01, on_tick=on_tick)
        cooldown.start(3)

        assert finished.wait(timeout=5)
        assert seen == [2, 1, 0]
        assert cooldown.remaining == 0
        cooldown.cancel()

    def test_cancel_stops_thread_and_clears(self):
        cooldown = ResendCooldown(tick_seconds=3600)
        cooldown.start(45)
        thread = cooldown._thread

        cooldown.cancel()

        assert cooldown.remaining == 0
        assert not thread.is_alive()

    def test_restart_replaces_running_countdown(self):
        cooldown = ResendCooldown(tick_seconds=3600)
        cooldown.start(45)
        first = cooldown._thread

        cooldown.start(10)

        assert cooldown.remaining == 10
        assert not first.is_alive()
        cooldown.cancel()

    def test_zero_seconds_starts_nothing(self):
        cooldown = ResendCooldown()
        cooldown.start(0)

        assert not cooldown.is_active
        assert cooldown._thread is None
