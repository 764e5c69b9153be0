from types import SimpleNamespace

import pytest

from okta_provider.core import lifecycle
from okta_provider.core.errors import StatusTransitionTimeout
from okta_provider.core.lifecycle import map_status, update_user_status, wait_for_status_transition


@pytest.fixture
def clock(monkeypatch):
    """Fake monotonic clock; sleeping advances it instantly."""
    fake = SimpleNamespace(now=0.0, slept=[])

    def sleep(seconds):
        fake.slept.append(seconds)
        fake.now += seconds

    fake.monotonic = lambda: fake.now
    fake.sleep = sleep
    monkeypatch.setattr(lifecycle, "time", fake)
    return fake


@pytest.mark.parametrize(
    "raw, mapped",
    [
        ("PASSWORD_EXPIRED", "ACTIVE"),
        ("RECOVERY", "ACTIVE"),
        ("ACTIVE", "ACTIVE"),
        ("PROVISIONED", "PROVISIONED"),
        ("SUSPENDED", "SUSPENDED"),
        ("DEPROVISIONED", "DEPROVISIONED"),
        ("LOCKED_OUT", "LOCKED_OUT"),
    ],
)
def test_map_status(raw, mapped):
    assert map_status(raw) == mapped


@pytest.mark.parametrize(
    "current, desired, call",
    [
        ("ACTIVE", "SUSPENDED", "suspend_user"),
        ("ACTIVE", "DEPROVISIONED", "deactivate_user"),
        ("SUSPENDED", "ACTIVE", "unsuspend_user"),
        ("DEPROVISIONED", "ACTIVE", "activate_user"),
        ("STAGED", "ACTIVE", "activate_user"),
    ],
)
def test_update_user_status_picks_lifecycle_call(adapter, current, desired, call):
    adapter.get_user.return_value = {"id": "00u1", "status": current}

    update_user_status(adapter, "00u1", desired, poll_interval=0)

    getattr(adapter, call).assert_called_once_with("00u1")


def test_password_expired_to_active_makes_no_lifecycle_call(adapter):
    adapter.get_user.return_value = {"id": "00u1", "status": "PASSWORD_EXPIRED"}

    update_user_status(adapter, "00u1", "ACTIVE", poll_interval=0)

    adapter.activate_user.assert_not_called()
    adapter.unsuspend_user.assert_not_called()


def test_wait_polls_until_transition_clears(adapter, clock):
    adapter.get_user.side_effect = [
        {"id": "00u1", "status": "ACTIVE", "transitioningToStatus": "SUSPENDED"},
        {"id": "00u1", "status": "ACTIVE", "transitioningToStatus": "SUSPENDED"},
        {"id": "00u1", "status": "SUSPENDED"},
    ]

    user = wait_for_status_transition(adapter, "00u1", poll_interval=0.5, poll_timeout=10)

    assert user["status"] == "SUSPENDED"
    assert adapter.get_user.call_count == 3
    assert clock.slept == [0.5, 0.5]


def test_wait_times_out(adapter, clock):
    adapter.get_user.return_value = {"id": "00u1", "status": "ACTIVE", "transitioningToStatus": "DEPROVISIONED"}

    with pytest.raises(StatusTransitionTimeout) as exc_info:
        wait_for_status_transition(adapter, "00u1", poll_interval=1, poll_timeout=3)

    assert exc_info.value.target == "DEPROVISIONED"
    assert exc_info.value.waited == 3
    assert adapter.get_user.call_count == 4


def test_slow_reads_count_against_timeout(adapter, clock):
    def slow_get_user(user_id):
        clock.now += 2
        return {"id": user_id, "status": "ACTIVE", "transitioningToStatus": "SUSPENDED"}

    adapter.get_user.side_effect = slow_get_user

    with pytest.raises(StatusTransitionTimeout) as exc_info:
        wait_for_status_transition(adapter, "00u1", poll_interval=2, poll_timeout=3)

    assert adapter.get_user.call_count == 2
    assert exc_info.value.waited == 5
    # The last sleep is cut to what is left before the deadline
    assert clock.slept == [1]


def test_zero_interval_still_times_out(adapter):
    adapter.get_user.return_value = {"id": "00u1", "status": "ACTIVE", "transitioningToStatus": "SUSPENDED"}

    with pytest.raises(StatusTransitionTimeout):
        wait_for_status_transition(adapter, "00u1", poll_interval=0, poll_timeout=0.05)

    assert adapter.get_user.call_count >= 1
