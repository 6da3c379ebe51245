import json
from datetime import date, time
from decimal import Decimal

import pytest

from barbershop.models import Appointment
from barbershop.services.scheduling import compute_end_time


@pytest.fixture
def make_appointment(db_session, shop, barber, service):
    def factory(day, start, status="pending", **fields):
        appointment = Appointment(
            barbershop_id=fields.pop("barbershop_id", shop.id),
            barber_id=fields.pop("barber_id", barber.id),
            service_id=fields.pop("service_id", service.id),
            date=day,
            start_time=start,
            end_time=compute_end_time(start, 30),
            price=Decimal("55.00"),
            status=status,
            **fields,
        )
        db_session.add(appointment)
        db_session.commit()
        return appointment

    return factory


@pytest.mark.appointments
class TestListAppointments:
    def test_filter_by_date_ordered_by_start(self, client, auth_headers, make_appointment):
        make_appointment(date(2024, 6, 10), time(14, 0))
        make_appointment(date(2024, 6, 10), time(9, 0))
        make_appointment(date(2024, 6, 11), time(8, 0))

        response = client.get("/api/appointments?date=2024-06-10", headers=auth_headers)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert [a["startTime"] for a in data] == ["09:00", "14:00"]
        assert all(a["date"] == "2024-06-10" for a in data)

    def test_unfiltered_newest_day_first(self, client, auth_headers, make_appointment):
        make_appointment(date(2024, 6, 10), time(14, 0))
        make_appointment(date(2024, 6, 12), time(10, 0))
        make_appointment(date(2024, 6, 10), time(9, 0))

        data = json.loads(client.get("/api/appointments", headers=auth_headers).data)

        assert [(a["date"], a["startTime"]) for a in data] == [
            ("2024-06-12", "10:00"),
            ("2024-06-10", "09:00"),
            ("2024-06-10", "14:00"),
        ]

    def test_malformed_date(self, client, auth_headers, shop):
        response = client.get("/api/appointments?date=10/06/2024", headers=auth_headers)
        assert response.status_code == 400

    def test_today(self, client, auth_headers, make_appointment):
        make_appointment(date.today(), time(10, 0))
        make_appointment(date(2000, 1, 1), time(10, 0))

        data = json.loads(client.get("/api/appointments/today", headers=auth_headers).data)

        assert len(data) == 1
        assert data[0]["date"] == date.today().isoformat()

    def test_other_tenant_appointments_hidden(
        self, client, auth_headers, make_appointment, other_shop
    ):
        make_appointment(date(2024, 6, 10), time(9, 0))
        make_appointment(
            date(2024, 6, 10),
            time(10, 0),
            barbershop_id=other_shop["shop"].id,
            barber_id=other_shop["barber"].id,
            service_id=other_shop["service"].id,
        )

        data = json.loads(
            client.get("/api/appointments?date=2024-06-10", headers=auth_headers).data
        )
        assert [a["startTime"] for a in data] == ["09:00"]


@pytest.mark.appointments
class TestCreateAppointment:
    def test_defaults_from_service(self, client, auth_headers, barber, service, customer):
        response = client.post(
            "/api/appointments",
            json={
                "barberId": barber.id,
                "serviceId": service.id,
                "clientId": customer.id,
                "date": "2024-06-10",
                "startTime": "10:15",
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data["endTime"] == "10:45"
        assert data["price"] == "55.00"
        assert data["status"] == "pending"
        assert data["clientName"] == "Carlos Lima"

    def test_explicit_end_and_price(self, client, auth_headers, barber, service):
        response = client.post(
            "/api/appointments",
            json={
                "barberId": barber.id,
                "serviceId": service.id,
                "date": "2024-06-10",
                "startTime": "10:00",
                "endTime": "11:00",
                "price": "70.00",
                "status": "confirmed",
            },
            headers=auth_headers,
        )

        data = json.loads(response.data)
        assert response.status_code == 201
        assert data["endTime"] == "11:00"
        assert data["price"] == "70.00"
        assert data["confirmedAt"] is not None

    def test_missing_fields(self, client, auth_headers, barber):
        response = client.post(
            "/api/appointments", json={"barberId": barber.id}, headers=auth_headers
        )

        assert response.status_code == 400
        assert "serviceId" in json.loads(response.data)["message"]

    def test_barber_of_other_tenant(self, client, auth_headers, service, other_shop):
        response = client.post(
            "/api/appointments",
            json={
                "barberId": other_shop["barber"].id,
                "serviceId": service.id,
                "date": "2024-06-10",
                "startTime": "10:00",
            },
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert json.loads(response.data)["message"] == "Barber not found"

    def test_double_booking_allowed(self, client, auth_headers, barber, service):
        payload = {
            "barberId": barber.id,
            "serviceId": service.id,
            "date": "2024-06-10",
            "startTime": "10:00",
        }
        first = client.post("/api/appointments", json=payload, headers=auth_headers)
        second = client.post("/api/appointments", json=payload, headers=auth_headers)

        assert first.status_code == 201
        assert second.status_code == 201


@pytest.mark.appointments
class TestAppointmentStatus:
    def test_confirm_stamps_timestamp(self, client, auth_headers, make_appointment):
        appointment = make_appointment(date(2024, 6, 10), time(9, 0))

        response = client.patch(
            f"/api/appointments/{appointment.id}/status",
            json={"status": "confirmed"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["status"] == "confirmed"
        assert data["confirmedAt"] is not None
        assert data["completedAt"] is None

    def test_same_status_restamps(self, client, db_session, auth_headers, make_appointment):
        appointment = make_appointment(date(2024, 6, 10), time(9, 0))
        url = f"/api/appointments/{appointment.id}/status"

        client.patch(url, json={"status": "cancelled"}, headers=auth_headers)
        first = appointment.cancelled_at
        response = client.patch(url, json={"status": "cancelled"}, headers=auth_headers)

        assert response.status_code == 200
        db_session.refresh(appointment)
        assert appointment.cancelled_at >= first

    def test_illegal_transition(self, client, auth_headers, make_appointment):
        appointment = make_appointment(date(2024, 6, 10), time(9, 0), status="completed")

        response = client.patch(
            f"/api/appointments/{appointment.id}/status",
            json={"status": "pending"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "Cannot change status" in json.loads(response.data)["message"]

    def test_unknown_status(self, client, auth_headers, make_appointment):
        appointment = make_appointment(date(2024, 6, 10), time(9, 0))

        response = client.patch(
            f"/api/appointments/{appointment.id}/status",
            json={"status": "archived"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_missing_status(self, client, auth_headers, make_appointment):
        appointment = make_appointment(date(2024, 6, 10), time(9, 0))

        response = client.patch(
            f"/api/appointments/{appointment.id}/status", json={}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_other_tenant_appointment_not_found(
        self, client, db_session, auth_headers, shop, make_appointment, other_shop
    ):
        foreign = make_appointment(
            date(2024, 6, 10),
            time(9, 0),
            barbershop_id=other_shop["shop"].id,
            barber_id=other_shop["barber"].id,
            service_id=other_shop["service"].id,
        )

        response = client.patch(
            f"/api/appointments/{foreign.id}/status",
            json={"status": "cancelled"},
            headers=auth_headers,
        )

        assert response.status_code == 404
        db_session.refresh(foreign)
        assert foreign.status == "pending"

    def test_completion_updates_client_totals(
        self, client, db_session, auth_headers, customer, make_appointment
    ):
        appointment = make_appointment(
            date(2024, 6, 10), time(9, 0), client_id=customer.id
        )

        response = client.patch(
            f"/api/appointments/{appointment.id}/status",
            json={"status": "completed"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        db_session.refresh(customer)
        assert customer.total_visits == 1
        assert customer.total_spent == Decimal("55.00")
        assert customer.last_visit is not None

    @pytest.mark.parametrize("first", ["completed", "cancelled"])
    def test_closed_appointment_can_become_no_show(
        self, client, auth_headers, barber, service, first
    ):
        booked = json.loads(
            client.post(
                "/api/appointments",
                json={
                    "barberId": barber.id,
                    "serviceId": service.id,
                    "date": "2024-06-10",
                    "startTime": "09:00",
                },
                headers=auth_headers,
            ).data
        )
        url = f"/api/appointments/{booked['id']}/status"

        assert client.patch(url, json={"status": first}, headers=auth_headers).status_code == 200
        response = client.patch(url, json={"status": "no_show"}, headers=auth_headers)

        assert response.status_code == 200
        assert json.loads(response.data)["status"] == "no_show"

    def test_no_show_cannot_reopen(self, client, auth_headers, make_appointment):
        appointment = make_appointment(date(2024, 6, 10), time(9, 0), status="no_show")

        response = client.patch(
            f"/api/appointments/{appointment.id}/status",
            json={"status": "confirmed"},
            headers=auth_headers,
        )
        assert response.status_code == 400
