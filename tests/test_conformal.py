from signal_fusion.conformal import ConformalGate, check_gate

def test_wide_interval_passes_without_costs():
    res = check_gate("1h", 0.0, 0.0)
    assert res.passed
    assert res.lower == -0.002 and res.upper == 0.002

def test_costly_short_timeframe_fails():
    assert not check_gate("5m", 0.0015, 0.0005).passed

def test_cost_floor_applies():
    gate = ConformalGate({"1h": 0.0008})
    assert not gate.check("1h", 0.0, 0.0).passed
    assert ConformalGate({"1h": 0.0008}, floor=0.0).check("1h", 0.0, 0.0).passed

def test_defaults_pass_at_default_costs():
    for tf in ("5m", "1h", "4h"):
        assert check_gate(tf, 0.0005, 0.0002).passed
