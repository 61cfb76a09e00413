from bubbletrack.gestures.pulse import ResetPulse


def test_mount_value_does_not_pulse():
    pulse = ResetPulse(duration_ms=420)
    assert pulse.observe(1_000, now=5_000) is False
    assert pulse.is_active(5_000) is False


def test_new_value_arms_for_fixed_duration():
    pulse = ResetPulse(duration_ms=420)
    pulse.observe(1_000, now=5_000)
    assert pulse.observe(6_000, now=6_000) is True
    assert pulse.is_active(6_100) is True
    assert pulse.is_active(6_420) is False


def test_same_value_on_rerender_does_not_rearm():
    pulse = ResetPulse(duration_ms=420)
    pulse.observe(1_000, now=0)
    pulse.observe(2_000, now=2_000)
    assert pulse.observe(2_000, now=2_500) is False
    assert pulse.is_active(2_500) is False
