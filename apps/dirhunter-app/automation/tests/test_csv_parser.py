"""Tests for loading directory lists from CSV."""

from directories import DirectoryCSVParser, filter_by_status, get_unsubmitted_directories


def write_csv(tmp_path, text, encoding="utf-8"):
    path = tmp_path / "directories.csv"
    path.write_text(text, encoding=encoding)
    return str(path)


def test_parses_required_and_optional_columns(tmp_path):
    path = write_csv(tmp_path, (
        "name,url,submit_url,submit_button,status\n"
        "Alpha,https://alpha.test,,#open,\n"
        "Beta,https://beta.test,https://beta.test/new,,submitted\n"
    ))

    records = DirectoryCSVParser(path).parse()

    assert [r.name for r in records] == ["Alpha", "Beta"]
    alpha, beta = records
    assert alpha.submit_url is None
    assert alpha.reveal_control == "#open"
    assert alpha.target_url == "https://alpha.test"
    assert beta.has_submit_url
    assert beta.target_url == "https://beta.test/new"
    assert beta.status == "submitted"


def test_column_variants_and_bom(tmp_path):
    path = write_csv(tmp_path, "Directory,Website\nGamma,https://gamma.test\n", encoding="utf-8-sig")

    records = DirectoryCSVParser(path).parse()

    assert len(records) == 1
    assert records[0].name == "Gamma"
    assert records[0].url == "https://gamma.test"
    assert records[0].reveal_control is None


def test_rows_missing_name_or_url_skipped(tmp_path):
    path = write_csv(tmp_path, "name,url\n,https://x.test\nNoUrl,\n  Delta , https://delta.test \n")

    records = DirectoryCSVParser(path).parse()

    assert [(r.name, r.url) for r in records] == [("Delta", "https://delta.test")]


def test_missing_file_returns_empty(tmp_path):
    assert DirectoryCSVParser(str(tmp_path / "nope.csv")).parse() == []


def test_missing_required_column_returns_empty(tmp_path):
    path = write_csv(tmp_path, "title,homepage\nAlpha,https://alpha.test\n")
    assert DirectoryCSVParser(path).parse() == []


def test_status_filters(tmp_path):
    path = write_csv(tmp_path, (
        "name,url,status\n"
        "A,https://a.test,\n"
        "B,https://b.test, Submitted \n"
        "C,https://c.test,pending\n"
    ))
    records = DirectoryCSVParser(path).parse()

    assert [r.name for r in get_unsubmitted_directories(records)] == ["A"]
    assert [r.name for r in filter_by_status(records, "submitted")] == ["B"]
    assert [r.name for r in filter_by_status(records, "PENDING")] == ["C"]
