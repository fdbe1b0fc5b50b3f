"""
Branch and vehicle endpoint tests.
"""

from tests.conftest import API


class TestBranches:
    """Branch CRUD"""

    def test_create_sanitizes_phone(self, client, auth_headers):
        response = client.post(
            f"{API}/branches",
            json={'branch_name': '  North  ', 'phone_number': '+92 (300) 123-4567'},
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data['branch_name'] == 'North'
        assert data['phone_number'] == '+923001234567'
        assert data['id'].startswith('BR-')

    def test_blank_phone_stored_as_null(self, client, auth_headers):
        response = client.post(
            f"{API}/branches",
            json={'branch_name': 'South', 'phone_number': '   '},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()['phone_number'] is None

    def test_blank_name_rejected(self, client, auth_headers):
        response = client.post(f"{API}/branches", json={'branch_name': '   '}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()['message'] == 'Branch name is required'

    def test_update_and_get(self, client, auth_headers, make_branch):
        branch = make_branch()
        response = client.put(
            f"{API}/branches/{branch['id']}",
            json={'address': 'Main Road'},
            headers=auth_headers,
        )
        assert response.status_code == 200
        fetched = client.get(f"{API}/branches/{branch['id']}", headers=auth_headers).json()
        assert fetched['address'] == 'Main Road'
        assert fetched['branch_name'] == 'Main Branch'

    def test_unknown_branch(self, client, auth_headers):
        response = client.get(f"{API}/branches/BR-MISSING1", headers=auth_headers)
        assert response.status_code == 404

    def test_delete_detaches_vehicles(self, client, auth_headers, make_branch, make_vehicle):
        branch = make_branch()
        vehicle = make_vehicle(branch_id=branch['id'])

        response = client.delete(f"{API}/branches/{branch['id']}", headers=auth_headers)
        assert response.status_code == 200

        fetched = client.get(f"{API}/vehicles/{vehicle['id']}", headers=auth_headers).json()
        assert fetched['branch_id'] is None


class TestVehicles:
    """Vehicle CRUD"""

    def test_create_normalizes_number_and_name(self, client, auth_headers):
        response = client.post(
            f"{API}/vehicles",
            json={'vehicle_number': ' lhr-42 ', 'driver_name': 'Ahmed', 'co_passenger_name': 'Bilal'},
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data['vehicle_number'] == 'LHR-42'
        assert data['vehicle_name'] == 'LHR-42'

    def test_duplicate_number(self, client, auth_headers, make_vehicle):
        make_vehicle(vehicle_number='KHI-1')
        response = client.post(
            f"{API}/vehicles",
            json={'vehicle_number': 'khi-1', 'driver_name': 'A', 'co_passenger_name': 'B'},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()['message'] == 'Vehicle number already exists'

    def test_unknown_branch(self, client, auth_headers):
        response = client.post(
            f"{API}/vehicles",
            json={
                'vehicle_number': 'ISB-7',
                'driver_name': 'A',
                'co_passenger_name': 'B',
                'branch_id': 'BR-NOPE0000',
            },
            headers=auth_headers,
        )
        assert response.status_code == 404
        assert response.json()['message'] == 'Branch not found'

    def test_filter_by_branch(self, client, auth_headers, make_branch, make_vehicle):
        branch = make_branch()
        make_vehicle(branch_id=branch['id'])
        make_vehicle()

        response = client.get(f"{API}/vehicles", params={'branch_id': branch['id']}, headers=auth_headers)
        assert response.json()['total'] == 1

        response = client.get(f"{API}/vehicles", headers=auth_headers)
        assert response.json()['total'] == 2

    def test_update_number_conflict(self, client, auth_headers, make_vehicle):
        first = make_vehicle()
        second = make_vehicle()
        response = client.put(
            f"{API}/vehicles/{second['id']}",
            json={'vehicle_number': first['vehicle_number']},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_delete_refused_with_trip(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle()
        client.post(
            f"{API}/trips",
            json={'vehicle_id': vehicle['id'], 'trip_name': 'Run 1'},
            headers=auth_headers,
        )
        response = client.delete(f"{API}/vehicles/{vehicle['id']}", headers=auth_headers)
        assert response.status_code == 400
        assert 'Cannot delete vehicle' in response.json()['message']

    def test_delete_refused_with_ledger(self, client, auth_headers, make_vehicle, make_ledger):
        vehicle = make_vehicle()
        make_ledger(vehicle=vehicle)
        response = client.delete(f"{API}/vehicles/{vehicle['id']}", headers=auth_headers)
        assert response.status_code == 400

    def test_delete(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle()
        response = client.delete(f"{API}/vehicles/{vehicle['id']}", headers=auth_headers)
        assert response.status_code == 200
        response = client.get(f"{API}/vehicles/{vehicle['id']}", headers=auth_headers)
        assert response.status_code == 404
