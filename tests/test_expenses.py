"""
Expense endpoint tests.
"""

from decimal import Decimal

from tests.conftest import API, post_expense


class TestExpenseCreate:

    def test_defaults(self, client, auth_headers):
        response = post_expense(client, auth_headers)
        assert response.status_code == 201
        data = response.json()
        assert data['expense_type'] == 'other'
        assert data['date']
        assert Decimal(data['amount']) == Decimal('100')

    def test_vehicle_reference_copies_name_and_branch(self, client, auth_headers, make_branch, make_vehicle):
        branch = make_branch()
        vehicle = make_vehicle(vehicle_name='Tanker 9', branch_id=branch['id'])

        data = post_expense(client, auth_headers, vehicle_id=vehicle['id']).json()
        assert data['vehicle_name'] == 'Tanker 9'
        assert data['branch_id'] == branch['id']

    def test_unknown_vehicle(self, client, auth_headers):
        response = post_expense(client, auth_headers, vehicle_id='VEH-MISSING0')
        assert response.status_code == 404
        assert response.json()['message'] == 'Vehicle not found'

    def test_unknown_trip(self, client, auth_headers):
        response = post_expense(client, auth_headers, trip_id='TRP-MISSING0')
        assert response.status_code == 404

    def test_negative_amount(self, client, auth_headers):
        response = post_expense(client, auth_headers, amount='-5')
        assert response.status_code == 422


class TestExpenseList:

    def test_filters_and_total_amount(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle()
        post_expense(client, auth_headers, amount='100', date='2024-05-01', vehicle_id=vehicle['id'])
        post_expense(client, auth_headers, amount='250', date='2024-05-10', expense_type='revenue')
        post_expense(client, auth_headers, amount='40', date='2024-06-01', title='Toll', category='Tolls')

        data = client.get(f"{API}/expenses", headers=auth_headers).json()
        assert data['total'] == 3
        assert Decimal(data['total_amount']) == Decimal('390')
        assert [e['date'] for e in data['expenses']] == ['2024-06-01', '2024-05-10', '2024-05-01']

        data = client.get(
            f"{API}/expenses",
            params={'date_from': '2024-05-01', 'date_to': '2024-05-31'},
            headers=auth_headers,
        ).json()
        assert data['total'] == 2
        assert Decimal(data['total_amount']) == Decimal('350')

        data = client.get(f"{API}/expenses", params={'expense_type': 'revenue'}, headers=auth_headers).json()
        assert data['total'] == 1

        data = client.get(f"{API}/expenses", params={'vehicle_id': vehicle['id']}, headers=auth_headers).json()
        assert data['total'] == 1

        data = client.get(f"{API}/expenses", params={'search': 'toll'}, headers=auth_headers).json()
        assert data['total'] == 1

    def test_empty_total_is_zero(self, client, auth_headers):
        data = client.get(f"{API}/expenses", headers=auth_headers).json()
        assert data['total'] == 0
        assert Decimal(data['total_amount']) == 0


class TestExpenseUpdateDelete:

    def test_update_clears_vehicle(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle()
        expense = post_expense(client, auth_headers, vehicle_id=vehicle['id']).json()

        response = client.put(
            f"{API}/expenses/{expense['id']}",
            json={'vehicle_id': None, 'amount': '75'},
            headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data['vehicle_id'] is None
        assert data['vehicle_name'] is None
        assert Decimal(data['amount']) == Decimal('75')

    def test_delete(self, client, auth_headers):
        expense = post_expense(client, auth_headers).json()
        assert client.delete(f"{API}/expenses/{expense['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"{API}/expenses/{expense['id']}", headers=auth_headers).status_code == 404
