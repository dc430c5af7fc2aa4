# tests/conftest.py
"""
Shared fixtures for django-workorders tests.
"""
import datetime
from decimal import Decimal

import pytest

from django_workorders.authorization import Actor
from django_workorders.choices import Role
from django_workorders.models import CrewMember, Job, PriceBookItem

COMPANY = "acme-electric"


@pytest.fixture
def make_actor(db, django_user_model):
    """Factory: create a user with a CrewMember row and return their Actor."""
    counter = {"n": 0}

    def _make(role, company_id=COMPANY):
        counter["n"] += 1
        user = django_user_model.objects.create_user(
            username=f"{role}{counter['n']}", password="test"
        )
        CrewMember.objects.create(user=user, role=role, company_id=company_id)
        return Actor(user=user, role=str(role))

    return _make


@pytest.fixture
def crew(make_actor):
    return make_actor(Role.CREW)


@pytest.fixture
def foreman(make_actor):
    return make_actor(Role.FOREMAN)


@pytest.fixture
def gf(make_actor):
    return make_actor(Role.GF)


@pytest.fixture
def qa(make_actor):
    return make_actor(Role.QA)


@pytest.fixture
def pm(make_actor):
    return make_actor(Role.PM)


@pytest.fixture
def admin(make_actor):
    return make_actor(Role.ADMIN)


@pytest.fixture
def job(db):
    """A new job."""
    return Job.objects.create(
        company_id=COMPANY,
        wo_number="WO-1001",
        pm_number="PM-35440499",
        address="123 Main St",
        city="Fresno",
    )


@pytest.fixture
def price_book_item(db):
    return PriceBookItem.objects.create(
        company_id=COMPANY,
        item_code="UG-TRENCH",
        description="Trench, 24in depth",
        unit="LF",
        unit_price=Decimal("25.00"),
        category="civil",
    )


@pytest.fixture
def location():
    return {"latitude": "36.737800", "longitude": "-119.787100", "accuracy": 5}


@pytest.fixture
def performed_by():
    return {"tier": "prime", "work_category": "civil", "foreman_name": "Dale Ortiz"}


@pytest.fixture
def photos():
    return [{
        "url": "units/wo-1001/trench-after.jpg",
        "latitude": "36.737810",
        "longitude": "-119.787120",
        "accuracy": 4,
        "photo_type": "after",
    }]


@pytest.fixture
def make_entry(crew, job, price_book_item, location, performed_by, photos):
    """Factory: create a draft unit entry on ``job``."""
    from django_workorders.services import create_unit_entry

    def _make(quantity=Decimal("50"), target_job=None, actor=None):
        return create_unit_entry(
            job=target_job or job,
            actor=actor or crew,
            price_book_item=price_book_item,
            quantity=quantity,
            work_date=datetime.date(2025, 6, 1),
            location=location,
            performed_by=performed_by,
            photos=photos,
        )

    return _make
