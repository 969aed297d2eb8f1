from bank_statement_tool.parsers.section_extractor import SECTION_CODES, SectionExtractor


def test_finds_all_sections(sample_statement):
    result = SectionExtractor().find_sections(sample_statement)

    assert result['found'] == {code: True for code in SECTION_CODES}
    deposits = result['sections']['deposits']
    assert "01/05 Deposit 1 $500.00" in deposits
    assert "Total Deposits" not in deposits
    assert "CHECKS PAID" not in deposits


def test_section_ends_at_total_line(sample_statement):
    checks = SectionExtractor().extract(sample_statement)['checks']
    assert checks.strip().splitlines() == [
        "CHECK NO. DESCRIPTION DATE PAID AMOUNT",
        "533 ^ 01/03 01/03 400.00",
    ]


def test_missing_total_runs_to_next_header_or_end():
    text = ("DEPOSITS AND ADDITIONS\n"
            "01/05 Deposit $1.00\n"
            "CHECKS PAID\n"
            "533 01/03 5.00\n")
    sections = SectionExtractor().extract(text)

    assert sections['deposits'] == "01/05 Deposit $1.00\n"
    assert sections['checks'] == "533 01/03 5.00\n"
    assert sections['card'] is None
    assert sections['electronic'] is None


def test_headers_are_case_sensitive():
    text = "deposits and additions\n01/05 Deposit $1.00\n"
    assert SectionExtractor().extract(text)['deposits'] is None


def test_total_lines_are_case_insensitive():
    text = "DEPOSITS AND ADDITIONS\n01/05 Deposit $1.00\nTOTAL DEPOSITS AND ADDITIONS $1.00\n01/06 Stray $2.00\n"
    assert SectionExtractor().extract(text)['deposits'] == "01/05 Deposit $1.00\n"


def test_empty_text():
    assert SectionExtractor().extract('') == {code: None for code in SECTION_CODES}
