import json
import sys
import pytest
import create_pricing_set as cli


@pytest.fixture
def pricing_file(tmp_path):
    path = tmp_path / "grille.json"
    path.write_text(json.dumps({
        "variables": {
            "tarif_km_base_chf": 3,
            "maj_carburant_pct": 5,
            "maj_embouteillage_pct": 2,
            "tva_rate_pct": 8.1,
        },
        "supplements": [{"nom": "Péage", "type": "fix", "montant": 20}],
    }), encoding="utf-8")
    return path


class TestCreatePricingSetCli:

    def test_usage(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["create_pricing_set.py"])
        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 1

    def test_invalid_file(self, monkeypatch, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        monkeypatch.setattr(sys, "argv", ["create_pricing_set.py", "Grille", str(path)])

        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 1

    def test_missing_variable(self, monkeypatch, tmp_path):
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"variables": {"tarif_km_base_chf": 3}}), encoding="utf-8")
        monkeypatch.setattr(sys, "argv", ["create_pricing_set.py", "Grille", str(path)])

        with pytest.raises(SystemExit) as exc:
            cli.main()
        assert exc.value.code == 1

    def test_creates_and_activates(self, monkeypatch, pricing_file):
        calls = []

        def fake_create(payload, activate=False):
            calls.append((payload, activate))
            return True

        monkeypatch.setattr(cli, "create_pricing_set", fake_create)
        monkeypatch.setattr(sys, "argv", ["create_pricing_set.py", "Grille 2025", str(pricing_file), "--activate"])

        with pytest.raises(SystemExit) as exc:
            cli.main()

        assert exc.value.code == 0
        payload, activate = calls[0]
        assert activate is True
        assert payload.name == "Grille 2025"
        assert payload.variables.tva_rate_pct == 8.1
        assert payload.supplements[0].nom == "Péage"
