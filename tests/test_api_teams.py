"""
GearGuard
Tests: Maintenance team API.
"""

from gearguard.models.team import MaintenanceTeam, TeamMember


class TestTeamCRUD:
    def test_admin_creates_and_updates_team(self, client, admin_headers):
        res = client.post("/api/v1/teams", headers=admin_headers,
                          json={"name": "Mechanics", "description": "Shop floor"})
        assert res.status_code == 201
        team_id = res.get_json()["id"]

        res = client.put(f"/api/v1/teams/{team_id}", headers=admin_headers,
                         json={"name": "Mechanics A"})
        assert res.status_code == 200
        assert res.get_json()["name"] == "Mechanics A"
        assert res.get_json()["description"] == "Shop floor"

    def test_member_forbidden(self, client, member_headers, team):
        res = client.post("/api/v1/teams", headers=member_headers, json={"name": "IT"})
        assert res.status_code == 403
        res = client.put(f"/api/v1/teams/{team.id}", headers=member_headers, json={"name": "IT"})
        assert res.status_code == 403
        assert MaintenanceTeam.query.count() == 1

    def test_name_required(self, client, admin_headers):
        res = client.post("/api/v1/teams", headers=admin_headers, json={"description": "x"})
        assert res.status_code == 422

    def test_list_sorted_and_get(self, client, admin_headers, member_headers):
        for name in ("Electricians", "Body shop"):
            client.post("/api/v1/teams", headers=admin_headers, json={"name": name})
        res = client.get("/api/v1/teams", headers=member_headers)
        assert [t["name"] for t in res.get_json()["items"]] == ["Body shop", "Electricians"]

        team_id = res.get_json()["items"][0]["id"]
        assert client.get(f"/api/v1/teams/{team_id}", headers=member_headers).status_code == 200
        assert client.get("/api/v1/teams/999", headers=member_headers).status_code == 404


class TestTeamMembers:
    def test_add_list_remove_member(self, client, admin_headers, team, member):
        url = f"/api/v1/teams/{team.id}/members"
        res = client.post(url, headers=admin_headers,
                          json={"user_id": member.id, "role": "Technician"})
        assert res.status_code == 201
        member_row_id = res.get_json()["id"]

        res = client.get(url, headers=admin_headers)
        items = res.get_json()["items"]
        assert len(items) == 1
        assert items[0]["user_id"] == member.id
        assert items[0]["role"] == "Technician"

        res = client.delete(f"/api/v1/team-members/{member_row_id}", headers=admin_headers)
        assert res.status_code == 200
        assert TeamMember.query.count() == 0

    def test_member_cannot_manage_members(self, client, member_headers, team, member):
        res = client.post(f"/api/v1/teams/{team.id}/members", headers=member_headers,
                          json={"user_id": member.id})
        assert res.status_code == 403

    def test_unknown_user_or_team(self, client, admin_headers, team, member):
        res = client.post(f"/api/v1/teams/{team.id}/members", headers=admin_headers,
                          json={"user_id": 999})
        assert res.status_code == 404
        res = client.post("/api/v1/teams/999/members", headers=admin_headers,
                          json={"user_id": member.id})
        assert res.status_code == 404

    def test_remove_unknown_member(self, client, admin_headers):
        res = client.delete("/api/v1/team-members/999", headers=admin_headers)
        assert res.status_code == 404
