"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Leads API Tests                                                 ║
║                                                                              ║
║  1. Création + auto-assignation (round robin / règle produit)                ║
║  2. Distribution manuelle des leads non assignés                             ║
║  3. Conversion lead → client, lead closed → client + commande                ║
║  4. Webhooks plateformes (clé API)                                           ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import asyncio

import pytest

from services.lead_conversion import LeadConversionError, find_or_create_customer

DRIVE_ID = "1AbCdEfGhIjKlMnOpQrStUvWxYz012345"


def _create_lead(client, **overrides):
    payload = {"full_name": "Lê Văn Cường", "phone": "0912345678", **overrides}
    response = client.post("/api/leads", json=payload)
    assert response.status_code == 200, response.text
    return response.json()["lead"]


class TestLeadCreation:

    def test_new_lead_is_normalized_and_assigned(self, client, sales_team):
        lead = _create_lead(client, phone="+84 912 345 678")
        assert lead["phone"] == "0912345678"
        assert lead["status"] == "new"
        assert lead["assigned_sales_id"] == sales_team[0]["id"]
        assert lead["assignment_method"] == "round_robin"

    def test_round_robin_spreads_load(self, client, sales_team):
        first = _create_lead(client, phone="0912000001")
        second = _create_lead(client, phone="0912000002")
        assert {first["assigned_sales_id"], second["assigned_sales_id"]} == {s["id"] for s in sales_team}

        employee = client.get(f"/api/sales-employees/{sales_team[0]['id']}").json()
        assert employee["daily_lead_count"] == 1
        assert employee["total_lead_count"] == 1

    def test_assignment_is_logged(self, client, sales_team):
        lead = _create_lead(client)
        assignments = client.get(f"/api/leads/{lead['id']}/assignments").json()
        assert assignments["count"] == 1
        assert assignments["assignments"][0]["method"] == "round_robin"

    def test_rule_takes_priority(self, client, sales_team, product_group):
        response = client.post("/api/sales-allocation/rules", json={
            "product_group_ids": [product_group["id"]],
            "assigned_sales_ids": [sales_team[1]["id"]]
        })
        assert response.status_code == 200

        lead = _create_lead(client, interested_product_group_id=product_group["id"])
        assert lead["assigned_sales_id"] == sales_team[1]["id"]
        assert lead["assignment_method"] == "product_based"

    def test_rule_without_target_rejected(self, client, sales_team):
        response = client.post("/api/sales-allocation/rules", json={
            "assigned_sales_ids": [sales_team[0]["id"]]
        })
        assert response.status_code == 400

    def test_invalid_phone(self, client):
        response = client.post("/api/leads", json={"full_name": "X", "phone": "123"})
        assert response.status_code == 422

    def test_no_sales_leaves_lead_unassigned(self, client):
        lead = _create_lead(client)
        assert lead["assigned_sales_id"] is None

    def test_list_and_filters(self, client, sales_team):
        _create_lead(client, phone="0912000001", full_name="Phạm Minh")
        _create_lead(client, phone="0912000002", full_name="Hoàng Lan")

        listing = client.get("/api/leads").json()
        assert listing["count"] == 2
        assert listing["data"][0]["sales_employee"]["full_name"]

        found = client.get("/api/leads", params={"search": "lan"}).json()
        assert found["count"] == 1

        assert client.get("/api/leads", params={"status": "bogus"}).status_code == 400

    def test_search_with_special_characters(self, client):
        _create_lead(client, phone="0912000001", email="minh+in@gmail.com")

        assert client.get("/api/leads", params={"search": "+84"}).json()["count"] == 0
        assert client.get("/api/leads", params={"search": "minh+in"}).json()["count"] == 1
        assert client.get("/api/leads", params={"search": "(0912"}).status_code == 200

    def test_manual_reassignment(self, client, sales_team):
        lead = _create_lead(client)
        response = client.put(f"/api/leads/{lead['id']}", json={"assigned_sales_id": sales_team[1]["id"]})
        updated = response.json()["lead"]
        assert updated["assigned_sales_id"] == sales_team[1]["id"]
        assert updated["assignment_method"] == "manual"

    def test_delete_cascades_interactions(self, client, sales_team):
        lead = _create_lead(client)
        client.post("/api/interaction-logs", json={
            "lead_id": lead["id"], "type": "call", "content": "Gọi lần 1", "lead_status": "calling"
        })
        detail = client.get(f"/api/leads/{lead['id']}").json()
        assert detail["status"] == "calling"
        assert detail["status_label"] == "Đang gọi"

        assert client.delete(f"/api/leads/{lead['id']}").status_code == 200
        assert client.get(f"/api/leads/{lead['id']}").status_code == 404
        assert client.get("/api/interaction-logs", params={"lead_id": lead["id"]}).json()["count"] == 0


class TestAutoDistribute:

    def test_without_active_sales(self, client):
        _create_lead(client)
        result = client.post("/api/sales-allocation/auto-distribute").json()
        assert result["assigned_count"] == 0
        assert result["total_leads"] == 0
        assert "Không có nhân viên Sales" in result["message"]

    def test_distributes_backlog(self, client):
        for i in range(3):
            _create_lead(client, phone=f"091200000{i + 1}")

        client.post("/api/sales-employees", json={"full_name": "Võ Thị Dung"})
        client.post("/api/sales-employees", json={"full_name": "Đỗ Văn Em"})

        result = client.post("/api/sales-allocation/auto-distribute").json()
        assert result["total_leads"] == 3
        assert result["assigned_count"] == 3
        assert result["assigned_by_round_robin"] == 3
        assert result["assigned_by_rule"] == 0

        counts = sorted(e["daily_lead_count"] for e in client.get("/api/sales-employees").json()["employees"])
        assert counts == [1, 2]

    def test_reset_daily_counts(self, client, sales_team):
        _create_lead(client)
        client.post("/api/sales-employees/reset-daily-counts")
        employees = client.get("/api/sales-employees").json()["employees"]
        assert all(e["daily_lead_count"] == 0 for e in employees)
        assert sum(e["total_lead_count"] for e in employees) == 1


class TestConversion:

    def test_convert_to_customer(self, client, sales_team):
        lead = _create_lead(client)
        result = client.post(f"/api/leads/{lead['id']}/convert").json()
        assert result["customer"]["phone"] == "0912345678"
        assert result["customer"]["account_manager_id"] == sales_team[0]["id"]

        converted = client.get(f"/api/leads/{lead['id']}").json()
        assert converted["is_converted"] is True
        assert converted["status"] == "closed"
        assert converted["converted_customer_id"] == result["customer"]["id"]

    def test_convert_twice_rejected(self, client):
        lead = _create_lead(client)
        client.post(f"/api/leads/{lead['id']}/convert")
        assert client.post(f"/api/leads/{lead['id']}/convert").status_code == 400

    def test_convert_reuses_customer_with_same_phone(self, client, customer):
        lead = _create_lead(client, phone=customer["phone"])
        result = client.post(f"/api/leads/{lead['id']}/convert").json()
        assert result["customer"]["id"] == customer["id"]

    def test_customer_lookup_normalizes_phone(self, client, customer):
        found = asyncio.run(find_or_create_customer({"full_name": "Sao Mai", "phone": "0084 901 234 567"}))
        assert found["id"] == customer["id"]

        with pytest.raises(LeadConversionError):
            asyncio.run(find_or_create_customer({"full_name": "Sao Mai", "phone": "12"}))

    def test_customer_delete_removes_its_interactions(self, client):
        lead = _create_lead(client)
        client.post("/api/interaction-logs", json={"lead_id": lead["id"], "type": "call", "content": "Tư vấn"})
        customer = client.post(f"/api/leads/{lead['id']}/convert").json()["customer"]
        after = client.post("/api/interaction-logs", json={
            "lead_id": lead["id"], "type": "message", "content": "Gửi mẫu qua Zalo"
        }).json()["interaction"]
        assert after["customer_id"] == customer["id"]

        logs = client.get("/api/interaction-logs", params={"lead_id": lead["id"]}).json()
        assert [log["customer_id"] for log in logs["interactions"]] == [customer["id"]] * 2

        assert client.delete(f"/api/customers/{customer['id']}").status_code == 200
        assert client.get("/api/interaction-logs", params={"lead_id": lead["id"]}).json()["count"] == 0

    def test_convert_unknown_lead(self, client):
        assert client.post("/api/leads/nope/convert").status_code == 404

    def test_convert_with_order_requires_closed(self, client):
        lead = _create_lead(client)
        response = client.post(f"/api/leads/{lead['id']}/convert-with-order", json={
            "order": {"description": "Hộp quà", "total_amount": 500000}
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "Chỉ có thể tạo đơn hàng cho lead đã chốt"

    def test_convert_with_order(self, client, sales_team):
        lead = _create_lead(client)
        client.put(f"/api/leads/{lead['id']}", json={"status": "closed"})

        response = client.post(f"/api/leads/{lead['id']}/convert-with-order", json={
            "customer": {"full_name": "Công ty TNHH Hoa Sen", "address": "12 Lê Lợi"},
            "order": {"description": "Hộp quà Tết", "total_amount": 2500000, "quantity": 500},
            "files": [{"google_drive_id": DRIVE_ID, "file_name": "logo.ai"}]
        })
        assert response.status_code == 200, response.text
        result = response.json()

        assert result["customer"]["full_name"] == "Công ty TNHH Hoa Sen"
        order = result["order"]
        assert order["status"] == "pending"
        assert order["final_amount"] == 2500000
        assert order["sales_employee_id"] == sales_team[0]["id"]
        assert order["lead_id"] == lead["id"]
        assert result["design_files"][0]["file_category"] == "request"
        assert result["design_files"][0]["storage_path"] == f"gdrive://{DRIVE_ID}"

        detail = client.get(f"/api/orders/{order['id']}").json()
        assert len(detail["request_files"]) == 1
        assert detail["result_files"] == []

        again = client.post(f"/api/leads/{lead['id']}/convert-with-order", json={
            "order": {"description": "Lần 2", "total_amount": 1}
        })
        assert again.status_code == 400

    def test_order_from_lead(self, client):
        lead = _create_lead(client)
        result = client.post(f"/api/leads/{lead['id']}/orders", json={
            "description": "Tờ rơi A5", "quantity": 1000, "unit_price": 500
        }).json()
        assert result["order"]["total_amount"] == 500000
        assert client.get(f"/api/leads/{lead['id']}").json()["is_converted"] is True


class TestWebhooks:

    def _source(self, client, type_="facebook", **overrides):
        response = client.post("/api/lead-sources", json={"type": type_, "name": "Fanpage", **overrides})
        return response.json()["source"]

    def test_source_gets_api_key(self, client):
        assert self._source(client)["api_key"].startswith("src_")

    def test_missing_key(self, client):
        response = client.post("/api/webhooks/facebook", json={"full_name": "A", "phone": "0912345678"})
        assert response.status_code == 400
        assert response.json()["detail"] == "API key is required"

    def test_wrong_platform_key(self, client):
        source = self._source(client, type_="zalo")
        response = client.post(
            "/api/webhooks/facebook",
            json={"full_name": "A", "phone": "0912345678"},
            headers={"x-api-key": source["api_key"]}
        )
        assert response.status_code == 400

    def test_inactive_source(self, client):
        source = self._source(client, is_active=False)
        response = client.post(
            "/api/webhooks/facebook",
            json={"full_name": "A", "phone": "0912345678"},
            headers={"x-api-key": source["api_key"]}
        )
        assert response.status_code == 400

    def test_unknown_platform(self, client):
        response = client.post("/api/webhooks/myspace", json={"full_name": "A", "phone": "0912345678"})
        assert response.status_code == 422

    def test_lead_created_from_webhook(self, client, sales_team):
        source = self._source(client)
        campaign = client.post("/api/campaigns", json={
            "source_id": source["id"], "name": "Tết 2026", "code": "TET26"
        }).json()["campaign"]

        response = client.post(
            "/api/webhooks/facebook",
            json={"full_name": "Ngô Bảo", "phone": "84912345678", "campaign_code": "TET26"},
            headers={"x-api-key": source["api_key"]}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True

        lead = client.get(f"/api/leads/{body['lead_id']}").json()
        assert lead["phone"] == "0912345678"
        assert lead["source_id"] == source["id"]
        assert lead["campaign_id"] == campaign["id"]
        assert lead["source_label"] == "facebook_webhook"
        assert lead["assigned_sales_id"] is not None
