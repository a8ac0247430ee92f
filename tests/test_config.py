def test_env_overrides_and_validation(monkeypatch, fresh_config):
    monkeypatch.setenv("SMREC_DEFAULT_NRECS", "25")
    monkeypatch.setenv("SMREC_SHOW_PROGRESS", "yes")

    cfg = fresh_config()

    assert cfg.DEFAULT_NRECS == 25
    assert cfg.SHOW_PROGRESS is True


def test_min_clamp_and_invalid_values_fall_back(monkeypatch, fresh_config):
    monkeypatch.setenv("SMREC_DEFAULT_NRECS", "0")
    monkeypatch.setenv("SMREC_SHOW_PROGRESS", "sometimes")

    cfg = fresh_config()

    assert cfg.DEFAULT_NRECS == 1
    assert cfg.SHOW_PROGRESS is False

    monkeypatch.setenv("SMREC_DEFAULT_NRECS", "many")
    cfg = fresh_config()

    assert cfg.DEFAULT_NRECS == 10


def test_default_count_is_used_when_n_is_omitted(monkeypatch, movie_smr):
    from smrec import scoring

    monkeypatch.setattr(scoring.config, "DEFAULT_NRECS", 2)

    assert len(scoring.recommendations(movie_smr, ["heat"], [1.0])) == 2
