from __future__ import annotations

import signal
import threading

from fecsim.tools.interrupt import Interrupt


def test_trigger_sets_and_arm_clears():
    it = Interrupt()
    assert not it.is_set()
    it.trigger()
    assert it.is_set()
    it.arm(install_signal=False)
    assert not it.is_set()


def test_sigint_handler_installed_then_restored():
    before = signal.getsignal(signal.SIGINT)
    it = Interrupt()
    with it:
        assert signal.getsignal(signal.SIGINT) == it._on_sigint
        it._on_sigint(signal.SIGINT, None)
        assert it.is_set()
    assert signal.getsignal(signal.SIGINT) == before


def test_no_handler_without_install_signal():
    before = signal.getsignal(signal.SIGINT)
    it = Interrupt().arm(install_signal=False)
    assert signal.getsignal(signal.SIGINT) == before
    it.disarm()
    assert signal.getsignal(signal.SIGINT) == before


def test_arm_off_main_thread_skips_signal_and_trigger_is_visible():
    before = signal.getsignal(signal.SIGINT)
    it = Interrupt()

    def worker() -> None:
        it.arm()
        it.trigger()

    th = threading.Thread(target=worker)
    th.start()
    th.join()

    assert it.is_set()
    assert signal.getsignal(signal.SIGINT) == before
    it.disarm()


def test_context_manager_clears_a_stale_trigger():
    it = Interrupt()
    it.trigger()
    with it as armed:
        assert armed is it
        assert not it.is_set()


def test_rearming_keeps_the_original_handler():
    before = signal.getsignal(signal.SIGINT)
    it = Interrupt()
    it.arm()
    it.arm()
    it.disarm()
    assert signal.getsignal(signal.SIGINT) == before
