import pytest

from specfit.parameters import FitParameters, Parameter


def test_set_then_at():
    params = FitParameters()
    params.set("teff", 25000.0, True)
    entry = params.at("teff")
    assert entry.value == 25000.0
    assert entry.frozen is True


def test_set_replaces_existing():
    params = FitParameters()
    params.set("logg", 4.0, False)
    params.set("logg", 5.5, True)
    assert params.at("logg") == Parameter(5.5, True)
    assert len(params) == 1


def test_getitem_creates_default_entry():
    params = FitParameters()
    entry = params["vrad"]
    assert entry == Parameter(0.0, False)
    assert "vrad" in params


def test_getitem_returns_mutable_entry():
    params = FitParameters()
    params["vsini"].value = 42.0
    params["vsini"].frozen = True
    assert params.at("vsini") == Parameter(42.0, True)


def test_at_missing_raises_key_error():
    params = FitParameters()
    with pytest.raises(KeyError):
        params.at("missing")
    assert "missing" not in params