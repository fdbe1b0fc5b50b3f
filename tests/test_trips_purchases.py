"""
Trip and fuel entry tests: derived trip totals, month filters and export.
"""

import csv
import io
from decimal import Decimal

import pytest

from tests.conftest import API


@pytest.fixture
def make_trip(client, auth_headers, make_vehicle):
    def _make(vehicle=None, trip_name="Karachi run", **extra):
        vehicle = vehicle or make_vehicle()
        response = client.post(
            f"{API}/trips",
            json={'vehicle_id': vehicle['id'], 'trip_name': trip_name, **extra},
            headers=auth_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest.fixture
def add_entry(client, auth_headers):
    def _add(trip_id, price, litre, type='Purchase', date='2024-05-03'):
        response = client.post(
            f"{API}/purchases",
            json={'trip_id': trip_id, 'price': price, 'litre': litre, 'type': type, 'date': date},
            headers=auth_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _add


def get_trip(client, headers, trip_id):
    return client.get(f"{API}/trips/{trip_id}", headers=headers).json()


class TestTrips:

    def test_create_copies_vehicle(self, client, auth_headers, make_vehicle, make_trip):
        vehicle = make_vehicle(vehicle_name='Tanker 3')
        trip = make_trip(vehicle=vehicle)
        assert trip['vehicle_name'] == 'Tanker 3'
        assert trip['vehicle_number'] == vehicle['vehicle_number']
        assert trip['status'] == 'Active'
        assert Decimal(trip['profit_loss']) == 0
        assert trip['is_profitable'] is True

    def test_unknown_vehicle(self, client, auth_headers):
        response = client.post(
            f"{API}/trips",
            json={'vehicle_id': 'VEH-MISSING0', 'trip_name': 'x'},
            headers=auth_headers,
        )
        assert response.status_code == 404

    def test_end_before_start(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle()
        response = client.post(
            f"{API}/trips",
            json={
                'vehicle_id': vehicle['id'],
                'trip_name': 'x',
                'start_date': '2024-05-10',
                'end_date': '2024-05-01',
            },
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_completing_sets_end_date(self, client, auth_headers, make_trip):
        trip = make_trip()
        response = client.put(
            f"{API}/trips/{trip['id']}",
            json={'status': 'Completed'},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()['end_date'] is not None

    def test_status_filter(self, client, auth_headers, make_trip):
        make_trip()
        make_trip(status='Completed')
        data = client.get(f"{API}/trips", params={'status': 'Completed'}, headers=auth_headers).json()
        assert data['total'] == 1


class TestTripStatistics:

    def test_totals_follow_entries(self, client, auth_headers, make_trip, add_entry):
        trip = make_trip()
        add_entry(trip['id'], '1000', '400', 'Purchase')
        add_entry(trip['id'], '700', '250', 'Sales')

        data = get_trip(client, auth_headers, trip['id'])
        assert Decimal(data['total_purchases']) == Decimal('1000')
        assert Decimal(data['total_sales']) == Decimal('700')
        assert Decimal(data['total_purchase_litres']) == Decimal('400')
        assert Decimal(data['total_sales_litres']) == Decimal('250')
        assert Decimal(data['profit_loss']) == Decimal('-300')
        assert data['is_profitable'] is False
        assert data['has_reached_breakeven'] is False

        add_entry(trip['id'], '500', '200', 'Sales')
        data = get_trip(client, auth_headers, trip['id'])
        assert Decimal(data['profit_loss']) == Decimal('200')
        assert data['is_profitable'] is True
        assert data['has_reached_breakeven'] is True

    def test_update_entry_recomputes(self, client, auth_headers, make_trip, add_entry):
        trip = make_trip()
        entry = add_entry(trip['id'], '1000', '400')

        response = client.put(
            f"{API}/purchases/{entry['id']}",
            json={'price': '600'},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert Decimal(get_trip(client, auth_headers, trip['id'])['total_purchases']) == Decimal('600')

    def test_moving_entry_recomputes_both_trips(self, client, auth_headers, make_vehicle, make_trip, add_entry):
        vehicle = make_vehicle()
        first = make_trip(vehicle=vehicle, trip_name='First')
        second = make_trip(vehicle=vehicle, trip_name='Second')
        entry = add_entry(first['id'], '800', '300', 'Sales')

        response = client.put(
            f"{API}/purchases/{entry['id']}",
            json={'trip_id': second['id']},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()['trip_name'] == 'Second'

        assert Decimal(get_trip(client, auth_headers, first['id'])['total_sales']) == 0
        assert Decimal(get_trip(client, auth_headers, second['id'])['total_sales']) == Decimal('800')

    def test_delete_entry_recomputes(self, client, auth_headers, make_trip, add_entry):
        trip = make_trip()
        entry = add_entry(trip['id'], '1000', '400')
        add_entry(trip['id'], '250', '100')

        response = client.delete(f"{API}/purchases/{entry['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert Decimal(get_trip(client, auth_headers, trip['id'])['total_purchases']) == Decimal('250')

    def test_trip_delete_removes_entries(self, client, auth_headers, make_trip, add_entry):
        trip = make_trip()
        entry = add_entry(trip['id'], '1000', '400')

        response = client.delete(f"{API}/trips/{trip['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"{API}/purchases/{entry['id']}", headers=auth_headers).status_code == 404

    def test_entry_for_unknown_trip(self, client, auth_headers):
        response = client.post(
            f"{API}/purchases",
            json={'trip_id': 'TRP-MISSING0', 'price': '1', 'litre': '1', 'type': 'Purchase'},
            headers=auth_headers,
        )
        assert response.status_code == 404
        assert response.json()['message'] == 'Trip not found'


class TestPurchaseListingAndExport:

    def test_month_filter(self, client, auth_headers, make_trip, add_entry):
        trip = make_trip()
        add_entry(trip['id'], '100', '10', date='2024-04-30')
        add_entry(trip['id'], '200', '20', date='2024-05-01')
        add_entry(trip['id'], '300', '30', date='2024-05-31')

        data = client.get(f"{API}/purchases", params={'month': '2024-05'}, headers=auth_headers).json()
        assert data['total'] == 2
        assert [p['date'] for p in data['purchases']] == ['2024-05-31', '2024-05-01']

    def test_bad_month(self, client, auth_headers):
        response = client.get(f"{API}/purchases", params={'month': 'May-2024'}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()['message'] == 'Month must be in YYYY-MM format'

    def test_export_csv(self, client, auth_headers, make_trip, add_entry):
        trip = make_trip()
        add_entry(trip['id'], '100', '10', date='2024-05-02')
        add_entry(trip['id'], '200', '20', 'Sales', date='2024-06-01')

        response = client.get(
            f"{API}/purchases/export",
            params={'month': '2024-05'},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.headers['content-type'].startswith('text/csv')
        assert 'purchases-2024-05.csv' in response.headers['content-disposition']

        rows = list(csv.DictReader(io.StringIO(response.text)))
        assert len(rows) == 1
        assert rows[0]['trip_name'] == 'Karachi run'
        assert rows[0]['type'] == 'Purchase'
        assert Decimal(rows[0]['price']) == Decimal('100')

    def test_export_json(self, client, auth_headers, make_trip, add_entry):
        trip = make_trip()
        add_entry(trip['id'], '100', '10')

        response = client.get(f"{API}/purchases/export", params={'format': 'json'}, headers=auth_headers)
        assert response.status_code == 200
        rows = response.json()
        assert isinstance(rows, list)
        assert rows[0]['trip_id'] == trip['id']
