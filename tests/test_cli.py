import pytest

from billiard_BEM.cli import build_argparser, main


def test_defaults():
    args = build_argparser().parse_args([])
    assert (args.n, args.side, args.k) == (24, 1.0, 2.5)
    assert args.scan is None


def test_single_assembly_prints_matrix(capsys):
    assert main(["--n", "8", "--k", "1.5", "--workers", "2"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 8
    assert all(line.count("i") == 8 for line in out)


def test_scan_prints_sigma_min(capsys):
    assert main(["--n", "8", "--scan", "1", "2", "3"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 3
    k, sigma = out[0].split()
    assert float(k) == pytest.approx(1.0)
    assert float(sigma) >= 0.0


def test_plot_option(tmp_path, capsys):
    import matplotlib.pyplot as plt

    plt.close("all")
    path = tmp_path / "nodes.png"
    assert main(["--n", "8", "--plot", str(path)]) == 0
    assert path.exists()
    assert plt.get_fignums() == []


@pytest.mark.parametrize("argv", [
    ["--n", "6"],
    ["--side", "-1"],
    ["--workers", "0"],
    ["--scan", "1", "2", "2.5"],
    ["--scan", "2", "1", "3"],
])
def test_invalid_arguments_exit_with_usage_error(argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    assert exc.value.code == 2
