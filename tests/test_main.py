# /tests/test_main.py

import logging

import pytest

from ccrm.config import AppConfig
from ccrm.main import CCRMApplication, main


@pytest.fixture(autouse=True)
def reset_ccrm_logging():
    """main() installs a stream handler; drop it so later tests start clean."""
    yield
    logger = logging.getLogger("ccrm")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


@pytest.fixture
def interchange_files(tmp_path):
    students = tmp_path / "in_students.txt"
    students.write_text(
        "id|regNo|name|email\n"
        "1|R001|Alice Johnson|alice@university.edu\n"
        "2|R002|Bob Smith|bob@university.edu\n",
        encoding="utf-8",
    )
    courses = tmp_path / "in_courses.txt"
    courses.write_text(
        "code|title|credits|semester|department\n"
        "CS101|Intro to Programming|4|FALL|CSE\n"
        "MA110|Discrete Mathematics|3|SPRING|MATH\n",
        encoding="utf-8",
    )
    return students, courses


def test_demo_runs_end_to_end(tmp_path, capsys):
    assert main(["--data-folder", str(tmp_path), "demo"]) == 0
    out = capsys.readouterr().out
    assert "Rejected: Already enrolled in CS101" in out
    assert "Alice Johnson (R001) Active:true GPA:9.00" in out
    assert "Grace Hopper [CSE]" in out
    assert "--- GPA Distribution ---" in out
    assert "Demo completed" in out


def test_import_stores_records_in_data_folder(tmp_path, interchange_files, capsys):
    students, courses = interchange_files
    data = tmp_path / "data"
    code = main(["--data-folder", str(data), "import",
                 "--students", str(students), "--courses", str(courses)])
    assert code == 0
    assert (data / "students.txt").read_text(encoding="utf-8").splitlines()[1] == (
        "1|R001|Alice Johnson|alice@university.edu"
    )
    assert len((data / "courses.txt").read_text(encoding="utf-8").splitlines()) == 3

    out_students = tmp_path / "out_students.txt"
    out_courses = tmp_path / "out_courses.txt"
    assert main(["--data-folder", str(data), "export",
                 "--students", str(out_students), "--courses", str(out_courses)]) == 0
    assert out_courses.read_text(encoding="utf-8") == courses.read_text(encoding="utf-8")
    assert "Exported 2 students" in capsys.readouterr().out


def test_import_with_bad_file_exits_non_zero(tmp_path, capsys):
    courses = tmp_path / "bad.txt"
    courses.write_text("header\nCS101|Intro|x|FALL|CSE\n", encoding="utf-8")
    assert main(["--data-folder", str(tmp_path / "data"), "import", "--courses", str(courses)]) == 1
    assert "line 2" in capsys.readouterr().err


def test_import_requires_a_file(tmp_path):
    assert main(["--data-folder", str(tmp_path), "import"]) == 2


def test_report_lists_loaded_students(tmp_path, interchange_files, capsys):
    students, courses = interchange_files
    data = tmp_path / "data"
    main(["--data-folder", str(data), "import", "--students", str(students), "--courses", str(courses)])
    capsys.readouterr()

    assert main(["--data-folder", str(data), "report", "--top", "1"]) == 0
    out = capsys.readouterr().out
    assert "GPA 0 : 2 students" in out
    assert "Alice Johnson GPA:0.00" in out
    assert "Bob Smith" not in out


def test_application_transcripts(tmp_path, capsys):
    application = CCRMApplication(AppConfig(data_folder=tmp_path))
    application.run_demo()
    capsys.readouterr()
    application.print_transcripts()
    out = capsys.readouterr().out
    assert "--- Carol Davis Transcript ---" in out
    assert "MA110 | Discrete Mathematics | Grade: N/A" in out


def test_report_explains_missing_enrollments(tmp_path, capsys):
    assert main(["--data-folder", str(tmp_path), "report"]) == 0
    assert "enrollments and grades from earlier sessions are not stored" in capsys.readouterr().out


def test_bad_log_level_exits_with_error(tmp_path, capsys):
    assert main(["--data-folder", str(tmp_path), "--log-level", "bogus", "report"]) == 1
    assert "Unknown log level 'bogus'" in capsys.readouterr().err


def test_badly_typed_config_file_exits_with_error(tmp_path, capsys):
    config = tmp_path / "ccrm.json"
    config.write_text('{"top_n": "5"}', encoding="utf-8")
    assert main(["--config", str(config), "report"]) == 1
    assert "top_n must be an integer" in capsys.readouterr().err
