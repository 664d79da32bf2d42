"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Catalogue, devis, calculateurs, dashboard                       ║
║                                                                              ║
║  Clients, groupes produits, matériaux / main d'oeuvre, devis,                ║
║  endpoints d'imposition, KPI, templates design, profil société               ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import pytest

DRIVE_ID = "1AbCdEfGhIjKlMnOpQrStUvWxYz012345"


@pytest.fixture
def costing(client, product_group):
    material = client.post("/api/materials", json={
        "product_group_id": product_group["id"],
        "element_name": "Giấy Couche 150",
        "unit": "tờ",
        "unit_price": 2000
    }).json()["material"]
    labor = client.post("/api/labor-costs", json={
        "action": "In offset",
        "product_group_id": product_group["id"],
        "material_id": material["id"],
        "unit_cost": 500
    }).json()["labor_cost"]
    return material, labor


# ==================== CLIENTS ====================

class TestCustomers:

    def test_duplicate_phone(self, client, customer):
        response = client.post("/api/customers", json={"full_name": "Khách khác", "phone": "+84901234567"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Số điện thoại đã tồn tại"

    def test_code_and_search(self, client, customer):
        assert customer["customer_code"].startswith("KH")
        found = client.get("/api/customers", params={"search": "sao mai"}).json()
        assert found["count"] == 1
        assert found["data"][0]["order_count"] == 0

    def test_search_is_literal(self, client, customer):
        client.post("/api/customers", json={"full_name": "In Ấn Hoàng Gia (Chi nhánh 2)", "phone": "0912345678"})

        for text in ("+84", "[", "*in"):
            response = client.get("/api/customers", params={"search": text})
            assert response.status_code == 200, text
            assert response.json()["count"] == 0

        found = client.get("/api/customers", params={"search": "(chi nhánh"}).json()
        assert found["count"] == 1
        assert found["data"][0]["phone"] == "0912345678"

    def test_update(self, client, customer):
        response = client.put(f"/api/customers/{customer['id']}", json={"address": "45 Hai Bà Trưng"})
        assert response.json()["customer"]["address"] == "45 Hai Bà Trưng"

    def test_delete_refused_with_orders(self, client, customer):
        client.post("/api/orders", json={"customer_id": customer["id"], "description": "Tem nhãn"})
        assert client.delete(f"/api/customers/{customer['id']}").status_code == 400

    def test_delete(self, client, customer):
        assert client.delete(f"/api/customers/{customer['id']}").status_code == 200
        assert client.get(f"/api/customers/{customer['id']}").status_code == 404


# ==================== CATALOGUE ====================

class TestCatalog:

    def test_duplicate_group_code(self, client, product_group):
        response = client.post("/api/product-groups", json={"name": "Túi nhựa", "code": "TUI"})
        assert response.status_code == 400

    def test_group_specialists(self, client, product_group, sales_team):
        for employee, primary in ((sales_team[0], False), (sales_team[1], True)):
            response = client.put(f"/api/sales-employees/{employee['id']}/specializations", json={
                "product_group_id": product_group["id"], "is_primary": primary
            })
            assert response.status_code == 200

        employees = client.get(f"/api/product-groups/{product_group['id']}/sales-employees").json()["employees"]
        assert [e["id"] for e in employees] == [sales_team[1]["id"], sales_team[0]["id"]]

    def test_labor_requires_existing_material(self, client, product_group):
        response = client.post("/api/labor-costs", json={
            "action": "Cán màng", "product_group_id": product_group["id"], "material_id": "nope", "unit_cost": 100
        })
        assert response.status_code == 400

    def test_material_in_use_cannot_be_deleted(self, client, costing):
        material, _ = costing
        assert client.delete(f"/api/materials/{material['id']}").status_code == 400

    def test_filters(self, client, costing, product_group):
        materials = client.get("/api/materials", params={"product_group_id": product_group["id"]}).json()
        assert materials["count"] == 1
        labor = client.get("/api/labor-costs", params={"material_id": costing[0]["id"]}).json()
        assert labor["labor_costs"][0]["action"] == "In offset"


# ==================== DEVIS ====================

class TestQuotations:

    def _payload(self, material, labor, **overrides):
        payload = {
            "customer_name": "Cửa hàng Hoa Mai",
            "customer_phone": "0987654321",
            "items": [{
                "product_name": "Tờ rơi A5",
                "quantity": 100,
                "unit": "tờ",
                "materials_lines": [{"material_id": material["id"], "qty_per_product": 2, "factor": 1.5}],
                "labor_lines": [{"labor_cost_id": labor["id"]}]
            }]
        }
        payload.update(overrides)
        return payload

    def test_create_quotation(self, client, costing):
        material, labor = costing
        client.put("/api/settings/company-profile", json={"name": "In Ấn Ánh Dương"})

        response = client.post("/api/quotations", json=self._payload(material, labor))
        assert response.status_code == 200, response.text
        quotation = response.json()["quotation"]

        assert quotation["quotation_code"].startswith("BG")
        assert quotation["lines"][0]["price"] == 6500
        assert quotation["total_amount"] == 650000
        assert quotation["company"]["name"] == "In Ấn Ánh Dương"
        assert quotation["items"][0]["materials_lines"][0]["material_name"] == "Giấy Couche 150"

        customers = client.get("/api/customers", params={"search": "0987654321"}).json()
        assert customers["count"] == 1
        assert quotation["customer_id"] == customers["data"][0]["id"]

    def test_price_frozen_after_catalog_change(self, client, costing):
        material, labor = costing
        quotation = client.post("/api/quotations", json=self._payload(material, labor)).json()["quotation"]
        client.put(f"/api/materials/{material['id']}", json={"unit_price": 9999})

        stored = client.get(f"/api/quotations/{quotation['id']}").json()
        assert stored["total_amount"] == 650000

    def test_incomplete_item(self, client, costing):
        material, _ = costing
        payload = self._payload(material, {"id": "x"})
        payload["items"][0]["labor_lines"] = []
        response = client.post("/api/quotations", json=payload)
        assert response.status_code == 400
        assert "Thiếu công đoạn" in response.json()["detail"]

    def test_unknown_cost_element(self, client, costing):
        material, _ = costing
        response = client.post("/api/quotations", json=self._payload(material, {"id": "ghost"}))
        assert response.status_code == 400

    def test_quotation_for_converted_lead(self, client, costing):
        material, labor = costing
        lead = client.post("/api/leads", json={"full_name": "Trịnh Hà", "phone": "0933333333"}).json()["lead"]
        converted = client.post(f"/api/leads/{lead['id']}/convert").json()["customer"]

        payload = self._payload(material, labor, lead_id=lead["id"], customer_phone=None)
        quotation = client.post("/api/quotations", json=payload).json()["quotation"]
        assert quotation["customer_id"] == converted["id"]
        assert client.get("/api/quotations", params={"lead_id": lead["id"]}).json()["count"] == 1

    def test_formatted_phone_reuses_existing_customer(self, client, costing, customer):
        material, labor = costing
        payload = self._payload(material, labor, customer_phone="+84 901 234 567")
        response = client.post("/api/quotations", json=payload)
        assert response.status_code == 200, response.text
        assert response.json()["quotation"]["customer_id"] == customer["id"]

        assert client.get("/api/customers").json()["count"] == 1

    def test_invalid_customer_phone(self, client, costing):
        material, labor = costing
        response = client.post("/api/quotations", json=self._payload(material, labor, customer_phone="123"))
        assert response.status_code == 422
        assert client.get("/api/customers").json()["count"] == 0


# ==================== IMPOSITION ====================

class TestLayoutEndpoints:

    def test_paper_sizes(self, client):
        sizes = client.get("/api/layout/paper-sizes").json()
        assert "65x92" in [p["name"] for p in sizes["print"]]
        assert sizes["die_cut"][0]["name"] == "A4"

    def test_print_defaults(self, client):
        result = client.post("/api/layout/print", json={}).json()
        assert result["paper"]["name"] == "65x92"
        assert result["best"]["ups_per_sheet"] == 32
        assert result["sheets_needed"] == 32

    def test_print_unknown_paper(self, client):
        response = client.post("/api/layout/print", json={"paper_size": "B9"})
        assert response.status_code == 400

    def test_print_half_custom_paper(self, client):
        response = client.post("/api/layout/print", json={"paper_width": 50})
        assert response.status_code == 400

    def test_box(self, client):
        result = client.post("/api/layout/box", json={"width": 10, "height": 10, "depth": 10, "quantity": 100}).json()
        assert result["flat_area_cm2"] == pytest.approx(781)
        assert result["costs"]["total"] > 0

    def test_bag_rejects_bad_handle(self, client):
        response = client.post("/api/layout/bag", json={
            "width": 20, "height": 30, "depth": 10, "quantity": 100, "handle_type": "ribbon"
        })
        assert response.status_code == 422

    def test_negative_dimension(self, client):
        response = client.post("/api/layout/box", json={"width": -1, "height": 10, "depth": 10, "quantity": 1})
        assert response.status_code == 422


# ==================== DASHBOARD ====================

class TestDashboard:

    def test_metrics_and_kpis(self, client, sales_team, customer):
        lead = client.post("/api/leads", json={"full_name": "Mai Anh", "phone": "0911111111"}).json()["lead"]
        client.put(f"/api/leads/{lead['id']}", json={"status": "closed"})
        client.post(f"/api/leads/{lead['id']}/convert-with-order", json={
            "order": {"description": "Hộp bánh", "total_amount": 10000000}
        })

        metrics = client.get("/api/dashboard/metrics").json()
        assert metrics["leads"]["total"] == 1
        assert metrics["leads"]["converted"] == 1
        assert metrics["orders"]["today"] == 1
        assert metrics["revenue"]["total"] == 10000000

        kpis = {k["id"]: k for k in client.get("/api/dashboard/employee-kpis").json()["employees"]}
        first = kpis[sales_team[0]["id"]]
        assert first["leads"] == 1
        assert first["orders"] == 1
        assert first["conversion_rate"] == 100.0
        assert first["progress_percent"] == 25

        ranking = client.get("/api/dashboard/ranking").json()
        assert ranking["top3"][0]["id"] == sales_team[0]["id"]

    def test_chart(self, client):
        client.post("/api/leads", json={"full_name": "Mai Anh", "phone": "0911111111"})
        data = client.get("/api/dashboard/chart").json()["data"]
        assert len(data) == 7
        assert data[-1]["leads"] == 1
        assert data[-1]["lead_ma"] == 0.3
        assert data[0]["name"] in ("T2", "T3", "T4", "T5", "T6", "T7", "CN")


# ==================== KPI / MARKETING / TEMPLATES / SETTINGS ====================

class TestReportsAndTemplates:

    def test_kpi_crud(self, client):
        kpi = client.post("/api/kpis", json={"ho_ten": "Nguyễn An", "kpi_thang": 40000000}).json()["kpi"]
        updated = client.put(f"/api/kpis/{kpi['id']}", json={"kpi_tuan": 10000000}).json()["kpi"]
        assert updated["kpi_thang"] == 40000000
        assert updated["kpi_tuan"] == 10000000
        assert client.get("/api/kpis", params={"search": "an"}).json()["count"] == 1
        assert client.get("/api/kpis", params={"search": "An?"}).json()["count"] == 0
        assert client.delete(f"/api/kpis/{kpi['id']}").status_code == 200

    def test_marketing_report(self, client):
        client.post("/api/marketing-reports", json={"ho_va_ten": "Lý Hùng", "so_mess": 120, "so_don": 12})
        reports = client.get("/api/marketing-reports").json()
        assert reports["data"][0]["so_don"] == 12

    def test_template_from_order(self, client, customer):
        order = client.post("/api/orders", json={
            "customer_id": customer["id"],
            "description": "Túi giấy kraft",
            "specifications": {"dimensions": "20x30x10", "paper_weight": "150gsm"}
        }).json()["order"]

        response = client.post("/api/design-templates/from-order", json={
            "order_id": order["id"], "name": "Túi kraft", "type": "bag"
        })
        assert response.status_code == 400

        client.post(f"/api/orders/{order['id']}/design-results", json={
            "google_drive_id": DRIVE_ID, "file_name": "final.pdf", "thumbnail_url": "https://thumb/2"
        })
        template = client.post("/api/design-templates/from-order", json={
            "order_id": order["id"], "name": "Túi kraft", "type": "bag"
        }).json()["template"]
        assert template["file_urls"] == [f"https://drive.google.com/file/d/{DRIVE_ID}/view"]
        assert template["dimensions"] == "20x30x10"
        assert template["customer_phone"] == customer["phone"]

        assert client.post(f"/api/design-templates/{template['id']}/use").json()["usage_count"] == 1
        stats = client.get("/api/design-templates/stats").json()
        assert stats["total"] == 1
        assert stats["by_type"]["bag"] == 1

    def test_company_profile_defaults_and_merge(self, client):
        profile = client.get("/api/settings/company-profile").json()
        assert profile["name"] == ""

        client.put("/api/settings/company-profile", json={"name": "In Ấn Ánh Dương", "phone": "0281234567"})
        client.put("/api/settings/company-profile", json={"tax_code": "0312345678"})
        profile = client.get("/api/settings/company-profile").json()
        assert profile["name"] == "In Ấn Ánh Dương"
        assert profile["tax_code"] == "0312345678"

    def test_drive_parse(self, client):
        result = client.post("/api/google-drive/parse", json={
            "urls": [f"https://drive.google.com/file/d/{DRIVE_ID}/view", "not a link"]
        }).json()
        assert result["count"] == 1
        assert result["invalid_count"] == 1
        assert result["files"][0]["file_id"] == DRIVE_ID
