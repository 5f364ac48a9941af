"""
Unit tests for the organize_products.py command-line script.
"""

import importlib.util
from pathlib import Path

import pytest

from catalog_organizer.core.store.sqlite_store import SQLiteProductStore

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "organize_products.py"


@pytest.fixture(scope="module")
def script():
    spec = importlib.util.spec_from_file_location("organize_products", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def db_path(tmp_path, sample_products):
    path = str(tmp_path / "products.db")
    SQLiteProductStore(path).add_products(sample_products)
    return path


class TestOrganizeScript:
    def test_parse_assignments(self, script):
        assert script.parse_assignments(["1=4", " 2 =0"]) == {"1": 4, "2": 0}
        with pytest.raises(ValueError):
            script.parse_assignments(["oops"])

    def test_classify(self, script, db_path, capsys):
        assert script.main(["--db", db_path, "classify", "Lavender Soy Candle"]) == 0

        out = capsys.readouterr().out
        assert "Product Type: CANDLE" in out
        assert "soy-wax" in out

    def test_organize_dry_run_writes_nothing(self, script, db_path, capsys):
        assert script.main(["--db", db_path, "organize"]) == 0

        out = capsys.readouterr().out
        assert "products to update" in out
        assert "Dry run" in out
        assert SQLiteProductStore(db_path).get_by_id("1").product_type is None

    def test_organize_apply_and_export(self, script, db_path, tmp_path, capsys):
        export = tmp_path / "preview.csv"

        assert script.main(["--db", db_path, "organize", "--apply", "--export", str(export)]) == 0

        assert export.exists()
        assert "Done! Updated" in capsys.readouterr().out
        assert SQLiteProductStore(db_path).get_by_id("1").product_type == "CANDLE"

    def test_stock_apply(self, script, db_path, capsys):
        assert script.main(["--db", db_path, "stock", "--set", "2=0", "--apply"]) == 0

        product = SQLiteProductStore(db_path).get_by_id("2")
        assert product.inventory_quantity == 0
        assert product.available_for_sale is False

    def test_stock_rejects_bad_assignment(self, script, db_path, capsys):
        assert script.main(["--db", db_path, "stock", "--set", "2"]) == 2

    def test_summary_and_low_stock(self, script, db_path, capsys):
        assert script.main(["--db", db_path, "summary"]) == 0
        assert "5 products" in capsys.readouterr().out

        assert script.main(["--db", db_path, "low-stock", "--threshold", "1"]) == 0
        out = capsys.readouterr().out
        assert "Rose Lotion" in out
        assert "Lavender" not in out

    def test_import_csv(self, script, tmp_path, capsys):
        csv_path = tmp_path / "products.csv"
        csv_path.write_text("id,title,tags,inventory_quantity\n001,Cedar Wax Melt,\"gift, sale\",4\n")
        db_path = str(tmp_path / "imported.db")

        assert script.main(["--db", db_path, "import", str(csv_path)]) == 0

        product = SQLiteProductStore(db_path).get_by_id("001")
        assert product.tags == frozenset({"gift", "sale"})
        assert product.available_for_sale is True

    def test_import_csv_blank_cells_use_defaults(self, script, tmp_path, capsys):
        csv_path = tmp_path / "products.csv"
        csv_path.write_text("id,title,product_type,inventory_quantity\n1,Candle,,\n")
        db_path = str(tmp_path / "imported.db")

        assert script.main(["--db", db_path, "import", str(csv_path)]) == 0

        product = SQLiteProductStore(db_path).get_by_id("1")
        assert product.inventory_quantity == 0
        assert product.product_type is None

    def test_import_csv_invalid_row_reported(self, script, tmp_path, capsys):
        csv_path = tmp_path / "products.csv"
        csv_path.write_text("id,title,inventory_quantity\n1,Candle,2\n2,Soap,lots\n")
        db_path = str(tmp_path / "imported.db")

        assert script.main(["--db", db_path, "import", str(csv_path)]) == 2

        assert "❌ Row 3 (2)" in capsys.readouterr().out
        assert SQLiteProductStore(db_path).get_product_count() == 0
