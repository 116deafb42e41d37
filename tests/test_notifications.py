"""Tests for the alert notifier"""
import asyncio

import pytest

from storefront.services.notifications import AlertNotifier, Severity


@pytest.mark.asyncio
async def test_alert_expires():
    notifier = AlertNotifier(ttl=0.01)

    notifier.notify("Added to cart")
    assert notifier.current.message == "Added to cart"
    assert notifier.current.severity == Severity.SUCCESS

    await asyncio.sleep(0.05)
    assert notifier.current is None


@pytest.mark.asyncio
async def test_newer_alert_survives_older_timer():
    notifier = AlertNotifier(ttl=0.05)

    notifier.notify("first", Severity.INFO)
    await asyncio.sleep(0.03)
    notifier.notify("second", "danger")
    await asyncio.sleep(0.03)

    # First alert's deadline has passed; the second is still within its own
    assert notifier.current.message == "second"
    assert notifier.current.severity == Severity.DANGER


def test_notify_outside_event_loop_keeps_alert():
    notifier = AlertNotifier(ttl=0.01)

    notifier.notify("Saved", Severity.WARNING)

    assert notifier.current.message == "Saved"
    notifier.dismiss()
    assert notifier.current is None


def test_unknown_severity_rejected():
    with pytest.raises(ValueError):
        AlertNotifier().notify("x", "purple")
