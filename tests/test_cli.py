"""
End-to-end tests for the ledgersort command line.
"""

import json
import os

import pytest

from ledgersort.cli import build_parser, main
from ledgersort.storage import load_document


SETTINGS = """
title: "CLI Test"
document: data/ledger.yaml
data_sources:
  - name: Checking
    file: data/checking.csv
    account: checking
    account_name: Main Checking
    date_column: Date
    description_column: Description
    amount_column: Amount
  - name: Card
    file: data/card.csv
    account: visa
    account_type: CREDIT_CARD
    date_column: Posted
    description_column: Payee
    amount_column: Amount
    negate_amounts: true
"""


@pytest.fixture
def project(tmp_path):
    """An initialized ledger directory with two statement files."""
    main(['init', str(tmp_path)])

    (tmp_path / 'config' / 'settings.yaml').write_text(SETTINGS)
    (tmp_path / 'data' / 'checking.csv').write_text(
        "Date,Description,Amount\n"
        "2024-01-03,STARBUCKS STORE 1234,-5.75\n"
        "2024-01-10,ONLINE CARD PAYMENT VISA,-500.00\n"
        "2024-01-15,HARDWARE STORE,-25.99\n"
    )
    (tmp_path / 'data' / 'card.csv').write_text(
        "Posted,Payee,Amount\n"
        "01/12/2024,PAYMENT THANK YOU,-500.00\n"
        "01/14/2024,WHOLE FOODS MARKET,82.10\n"
    )
    return tmp_path


def _run(project, *argv):
    main([argv[0], '--config', str(project / 'config'), *argv[1:]])


class TestInit:

    def test_creates_starter_files(self, tmp_path, capsys):
        main(['init', str(tmp_path / 'ledger')])

        assert (tmp_path / 'ledger' / 'config' / 'settings.yaml').exists()
        assert (tmp_path / 'ledger' / 'config' / 'categories.yaml').exists()
        assert (tmp_path / 'ledger' / '.gitignore').exists()
        assert (tmp_path / 'ledger' / 'data').is_dir()
        assert 'ledgersort import' in capsys.readouterr().out

    def test_keeps_existing_files(self, tmp_path, capsys):
        main(['init', str(tmp_path)])
        (tmp_path / 'config' / 'settings.yaml').write_text('title: mine\n')

        main(['init', str(tmp_path)])

        assert (tmp_path / 'config' / 'settings.yaml').read_text() == 'title: mine\n'
        assert '(exists)' in capsys.readouterr().out


class TestImport:

    def test_import_and_save(self, project, capsys):
        _run(project, 'import')

        out = capsys.readouterr().out
        assert 'Imported 5 new transaction(s)' in out

        document = load_document(str(project / 'data' / 'ledger.yaml'))
        by_desc = {t.description: t for t in document.transactions}
        assert by_desc['STARBUCKS STORE 1234'].category.id == 'dining'
        assert by_desc['WHOLE FOODS MARKET'].cents == -8210
        assert by_desc['ONLINE CARD PAYMENT VISA'].matching_transaction is by_desc['PAYMENT THANK YOU']
        assert document.accounts.get('visa').type.name == 'CREDIT_CARD'
        assert document.accounts.get('checking').name == 'Main Checking'

    def test_reimport_skips_duplicates(self, project, capsys):
        _run(project, 'import')
        _run(project, 'import')

        assert 'Imported 0 new transaction(s), skipped 5' in capsys.readouterr().out

    def test_dry_run_does_not_save(self, project):
        _run(project, 'import', '--dry-run')
        assert not (project / 'data' / 'ledger.yaml').exists()

    def test_unknown_source(self, project):
        with pytest.raises(SystemExit) as exc:
            _run(project, 'import', '--source', 'Savings')
        assert exc.value.code == 1

    def test_missing_config(self, tmp_path):
        with pytest.raises(SystemExit):
            main(['import', '--config', str(tmp_path / 'nowhere')])


class TestReports:

    def test_summary_json(self, project, capsys):
        _run(project, 'import')
        capsys.readouterr()

        _run(project, 'summary', '--format', 'json')

        result = json.loads(capsys.readouterr().out)
        assert result['months'] == ['2024-01']
        assert result['uncategorized']['count'] == 1

    def test_summary_text(self, project, capsys):
        _run(project, 'import')
        _run(project, 'summary')
        assert 'CLI Test' in capsys.readouterr().out

    def test_export(self, project, tmp_path):
        _run(project, 'import')
        output = tmp_path / 'export.csv'

        _run(project, 'export', str(output), '--uncategorized')

        lines = output.read_text().strip().splitlines()
        assert len(lines) == 2
        assert 'HARDWARE STORE' in lines[1]

    def test_explain_description(self, project, capsys):
        _run(project, 'explain', 'STARBUCKS #9', '--format', 'json')

        result = json.loads(capsys.readouterr().out)
        assert [m['id'] for m in result['matches']] == ['dining-starbucks']

    def test_rules_json(self, project, capsys):
        _run(project, 'rules', '--category', 'transfer', '--format', 'json')

        result = json.loads(capsys.readouterr().out)
        assert result[0]['id'] == 'transfer'
        assert [d['id'] for d in result[0]['detectors']] == ['transfer-online']


class TestApplyRules:

    def test_apply_reclassifies(self, project, capsys):
        _run(project, 'import')
        rules_file = project / 'config' / 'categories.yaml'
        rules_file.write_text("""
categories:
  - id: home
    name: Home
    type: EXPENSE
    color: "#795548"
    detectors:
      - id: home-hardware
        description: Hardware
        pattern: "HARDWARE.*"
""")

        _run(project, 'rules', '--apply', str(rules_file))

        document = load_document(str(project / 'data' / 'ledger.yaml'))
        hardware = [t for t in document.transactions if t.description == 'HARDWARE STORE'][0]
        assert hardware.category_detector.id == 'home-hardware'
        assert 'home-hardware' in capsys.readouterr().out

    def test_apply_bad_file(self, project):
        rules_file = project / 'config' / 'categories.yaml'
        rules_file.write_text("categories:\n  - id: dining\n    name: Dining\n    type: INCOME\n")

        with pytest.raises(SystemExit):
            _run(project, 'rules', '--apply', str(rules_file))


class TestParser:

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 0
        assert 'ledgersort' in capsys.readouterr().out

    def test_verbose_flag(self):
        args = build_parser().parse_args(['classify', '-vv'])
        assert args.verbose == 2
        assert args.settings == 'settings.yaml'
