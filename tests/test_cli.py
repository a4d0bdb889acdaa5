import importlib.util
from pathlib import Path

import pytest

from testgen.services.assessment_generator import AssessmentResult
from testgen.services.errors import ServiceError
from testgen.services.exporter import ExportedAssessment
from testgen.services.question_kinds import QuestionKind


SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "generate_assessment.py"


@pytest.fixture
def cli():
    spec = importlib.util.spec_from_file_location("generate_assessment_cli", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    module.configure_logging = lambda level=None: None
    return module


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "lesson.txt"
    path.write_text("Національно-визвольна війна почалася 1648 року.", encoding="utf-8")
    return path


def test_saves_artifact(cli, source_file, tmp_path, monkeypatch, capsys):
    def fake_generate_assessment(**kwargs):
        assert kwargs["kind_counts"][QuestionKind.matching] == 2
        assert kwargs["output_format"] == "html"
        kwargs["progress"]("variant", "Генерація варіанту 1...")
        artifact = ExportedAssessment(filename="Test_8_Тема_1.html", content=b"<html></html>", media_type="text/html")
        return AssessmentResult(artifact=artifact, document=None, variant1={}, variant2={})

    monkeypatch.setattr(cli, "generate_assessment", fake_generate_assessment)
    out_dir = tmp_path / "out"

    code = cli.main(
        ["--topic", "Тема", "--grade", "8", "--source", str(source_file), "--matching", "2",
         "--format", "html", "--output-dir", str(out_dir)]
    )

    assert code == 0
    assert (out_dir / "Test_8_Тема_1.html").read_bytes() == b"<html></html>"
    output = capsys.readouterr().out
    assert "Генерація варіанту 1..." in output
    assert str(out_dir / "Test_8_Тема_1.html") in output


def test_reports_failure(cli, source_file, tmp_path, monkeypatch, capsys):
    def fake_generate_assessment(**kwargs):
        raise ServiceError(403, "Permission denied")

    monkeypatch.setattr(cli, "generate_assessment", fake_generate_assessment)

    code = cli.main(["--topic", "Тема", "--grade", "8", "--source", str(source_file), "--sorting", "1",
                     "--output-dir", str(tmp_path)])

    assert code == 1
    assert "API Error: 403 - Permission denied" in capsys.readouterr().err


def test_missing_source_file(cli, tmp_path, capsys):
    code = cli.main(["--topic", "Тема", "--grade", "8", "--source", str(tmp_path / "missing.txt"), "--sorting", "1"])

    assert code == 1
    assert "Cannot read" in capsys.readouterr().err
