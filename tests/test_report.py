import pandas as pd

from utils.report import ReportBuilder


def test_report_sections(tmp_path):
    report = ReportBuilder("Co-movement & contagion")
    report.add_text("Sample", "100 common trading days")
    report.add_table("Estimates", pd.DataFrame({'estimate': [0.123456]}, index=['alpha']),
                     note="Robust standard errors")
    report.add_table("Nothing", pd.DataFrame())

    image = tmp_path / "figures" / "corr.png"
    image.parent.mkdir()
    image.write_bytes(b"")
    report.add_figure("Correlation", image, tmp_path, caption="Shaded stress periods")

    path = report.write(tmp_path / "report.html")
    html = path.read_text(encoding='utf-8')

    assert path.exists()
    assert "<title>Co-movement &amp; contagion</title>" in html
    assert "0.1235" in html
    assert "No results." in html
    assert 'src="figures/corr.png"' in html
    assert html.index("<h2>Sample</h2>") < html.index("<h2>Estimates</h2>") < html.index("<h2>Correlation</h2>")


def test_figure_outside_report_dir(tmp_path):
    report = ReportBuilder("Report")
    report.add_figure("Elsewhere", tmp_path / "other" / "x.png", tmp_path / "report")
    assert str(tmp_path / "other" / "x.png").replace("\\", "/") in report.render()
