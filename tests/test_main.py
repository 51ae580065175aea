import main


def test_parse_args_defaults():
    args = main.parse_args([])
    assert args.action is None
    assert args.concurrency is None


def test_parse_args_action():
    args = main.parse_args(["claim", "--wallets", "w.csv", "--concurrency", "4"])
    assert args.action == "claim"
    assert args.wallets == "w.csv"
    assert args.concurrency == 4


def test_main_exits_non_zero_on_missing_wallet_file(tmp_path):
    assert main.main(["check", "--wallets", str(tmp_path / "missing.csv")]) == 1


def test_main_runs_check(monkeypatch, tmp_path):
    calls = []

    async def fake_run_wallets(options, wallets_path, concurrency):
        calls.append((options.perform_claim, wallets_path, concurrency))

    monkeypatch.setattr(main, "run_wallets", fake_run_wallets)
    assert main.main(["check", "--wallets", "w.csv", "--concurrency", "3"]) == 0
    assert calls == [(False, "w.csv", 3)]
