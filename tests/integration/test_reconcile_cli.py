#!/usr/bin/env python3
"""
Integration tests for the reconcile commands

Runs the full load -> associate -> confirm workflow through the CLI against
synthetic catalog and receipt files.
"""

import json

import pytest
from click.testing import CliRunner

from receipt_reconciler.cli.main import main
from tests.fixtures.synthetic_data import save_synthetic_catalog, save_synthetic_receipt

ARROZ = "7896006711117"
LEITE_EXTRA = "17891000055127"
WHISKY = "7890000000016"


@pytest.mark.integration
@pytest.mark.cli
class TestReconcileRun:
    """Test reconcile run."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def invoke_run(self, receipt_file, catalog_files, *args):
        catalog_file, price_history_file = catalog_files
        return self.runner.invoke(
            main,
            [
                "reconcile",
                "run",
                str(receipt_file),
                "--catalog",
                str(catalog_file),
                "--prices",
                str(price_history_file),
                *args,
            ],
        )

    def test_full_workflow_prints_payload(self, receipt_file, catalog_files):
        """Test scanning, manual association and confirmation end to end."""
        result = self.invoke_run(
            receipt_file,
            catalog_files,
            "--scan",
            ARROZ,
            "--scan",
            LEITE_EXTRA,
            "--scan",
            WHISKY,
            "--associate",
            "3=prod-004",
            "--purchase-discount",
            "4,59",
        )

        assert result.exit_code == 0, result.output
        assert "Barcode fast path:" in result.output
        assert "Scanned barcodes (3):" in result.output
        assert "no line matches it confidently" in result.output
        assert "4 of 4 items associated" in result.output
        assert "Total:" in result.output
        assert "R$ 75.00" in result.output

        payload = json.loads(result.output[result.output.index("{") :])
        assert [item["productId"] for item in payload["items"]] == ["prod-001", "prod-002", "prod-003", "prod-004"]
        assert payload["purchaseDiscount"] == pytest.approx(4.59)

    def test_output_file(self, receipt_file, catalog_files, temp_dir):
        """Test --output writes the confirmed purchase."""
        output_file = temp_dir / "out" / "purchase.json"

        result = self.invoke_run(receipt_file, catalog_files, "--scan", ARROZ, "-o", str(output_file))

        assert result.exit_code == 0, result.output
        assert "Confirmed 2 items" in result.output

        payload = json.loads(output_file.read_text(encoding="utf-8"))
        assert [item["productId"] for item in payload["items"]] == ["prod-001", "prod-002"]
        assert payload["items"][0]["unitDiscount"] == 0.0

    def test_save_writes_to_configured_output_dir(self, receipt_file, catalog_files, tmp_path):
        """Test --save writes the payload under the configured output directory."""
        result = self.invoke_run(receipt_file, catalog_files, "--scan", ARROZ, "--save")

        assert result.exit_code == 0, result.output
        saved = tmp_path / "reconciler_data" / "purchases" / f"{receipt_file.stem}-purchase.json"
        assert str(saved) in result.output

        payload = json.loads(saved.read_text(encoding="utf-8"))
        assert [item["productId"] for item in payload["items"]] == ["prod-001", "prod-002"]

    def test_output_takes_precedence_over_save(self, receipt_file, catalog_files, temp_dir, tmp_path):
        """Test an explicit --output wins over --save."""
        output_file = temp_dir / "explicit.json"

        result = self.invoke_run(receipt_file, catalog_files, "--scan", ARROZ, "--save", "-o", str(output_file))

        assert result.exit_code == 0, result.output
        assert output_file.exists()
        assert not (tmp_path / "reconciler_data" / "purchases").exists()

    def test_production_with_explicit_catalog(self, receipt_file, catalog_files):
        """Test production runs with --catalog even when no default catalog exists."""
        catalog_file, price_history_file = catalog_files

        result = self.runner.invoke(
            main,
            [
                "--config-env",
                "production",
                "reconcile",
                "run",
                str(receipt_file),
                "--catalog",
                str(catalog_file),
                "--prices",
                str(price_history_file),
                "--dry-run",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "1 of 4 items associated" in result.output

    def test_dry_run_does_not_confirm(self, receipt_file, catalog_files):
        """Test --dry-run stops after review."""
        result = self.invoke_run(receipt_file, catalog_files, "--dry-run")

        assert result.exit_code == 0
        assert "Dry run: nothing confirmed" in result.output
        assert "purchaseDiscount" not in result.output
        assert "1 of 4 items associated" in result.output

    def test_verbose_run(self, receipt_file, catalog_files):
        """Test --verbose reports catalog and receipt sizes."""
        result = self.invoke_run(receipt_file, catalog_files, "--verbose", "--dry-run")

        assert result.exit_code == 0
        assert "Catalog: 6 products" in result.output
        assert "Receipt: 4 lines" in result.output

    def test_empty_confirmation_is_an_error(self, temp_dir, catalog_files):
        """Test a receipt with nothing associated cannot be confirmed."""
        receipt = save_synthetic_receipt(
            temp_dir / "bare.json",
            [{"name": "PRODUTO SEM CODIGO", "quantity": 1, "unitPrice": 3.0, "totalPrice": 3.0}],
        )

        result = self.invoke_run(receipt, catalog_files)

        assert result.exit_code == 1
        assert "No receipt line is associated" in result.output

    def test_unknown_product_id_is_a_notice(self, receipt_file, catalog_files):
        """Test an unknown manual id does not abort the run."""
        result = self.invoke_run(receipt_file, catalog_files, "--associate", "1=missing")

        assert result.exit_code == 0
        assert "Product missing not found in catalog" in result.output

    @pytest.mark.parametrize("value", ["prod-001", "x=prod-001", "1=", "-1=prod-001"])
    def test_malformed_association(self, receipt_file, catalog_files, value):
        """Test malformed --associate values are usage errors."""
        result = self.invoke_run(receipt_file, catalog_files, "--associate", value)

        assert result.exit_code == 2
        assert "INDEX=PRODUCT_ID" in result.output

    def test_association_index_out_of_range(self, receipt_file, catalog_files):
        """Test an index past the last line is a usage error."""
        result = self.invoke_run(receipt_file, catalog_files, "--associate", "9=prod-001")

        assert result.exit_code == 2
        assert "out of range" in result.output

    def test_missing_catalog(self, receipt_file, temp_dir):
        """Test a missing catalog file fails cleanly."""
        result = self.invoke_run(receipt_file, (temp_dir / "absent.json", temp_dir / "absent.csv"))

        assert result.exit_code == 1
        assert "Catalog file not found" in result.output

    def test_malformed_receipt(self, write_json_file, catalog_files):
        """Test a receipt without items fails cleanly."""
        receipt = write_json_file("receipt.json", {"store": "Mercado"})

        result = self.invoke_run(receipt, catalog_files)

        assert result.exit_code == 1
        assert "Malformed receipt" in result.output

    def test_configured_catalog_paths(self, receipt_file, tmp_path):
        """Test the catalog is found through configuration when no path is given."""
        save_synthetic_catalog(tmp_path / "reconciler_data" / "catalog")

        result = self.runner.invoke(main, ["reconcile", "run", str(receipt_file), "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "1 of 4 items associated" in result.output


@pytest.mark.integration
@pytest.mark.cli
class TestReconcileScore:
    """Test reconcile score."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def invoke_score(self, receipt_file, catalog_files, barcode):
        catalog_file, price_history_file = catalog_files
        return self.runner.invoke(
            main,
            [
                "reconcile",
                "score",
                str(receipt_file),
                barcode,
                "--catalog",
                str(catalog_file),
                "--prices",
                str(price_history_file),
            ],
        )

    def test_score_table(self, receipt_file, catalog_files):
        """Test the score table ranks open lines."""
        result = self.invoke_score(receipt_file, catalog_files, ARROZ)

        assert result.exit_code == 0, result.output
        assert "Product: Arroz Branco 5kg (prod-002)" in result.output
        assert "Price history: 2 prices, R$ 22.90 - R$ 24.50" in result.output
        assert "[1]*" in result.output
        assert "[0]" not in result.output
        assert "1.00  ARROZ BRANCO 5KG" in result.output

    def test_score_without_history(self, receipt_file, catalog_files, temp_dir):
        """Test products without history are still scored."""
        catalog_file, _ = catalog_files

        result = self.invoke_score(receipt_file, (catalog_file, temp_dir / "absent.csv"), "0012345678905")

        assert result.exit_code == 0
        assert "Price history: none" in result.output

    def test_score_unknown_barcode(self, receipt_file, catalog_files):
        """Test unknown barcodes are reported as errors."""
        result = self.invoke_score(receipt_file, catalog_files, "0000000000000")

        assert result.exit_code == 1
        assert "not found in catalog" in result.output
