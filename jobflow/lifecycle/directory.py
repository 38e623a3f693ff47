"""
Customer and technician directories.

Thin CRUD over PersistenceAdapter. Jobs reference customers; appointments
reference technicians.
"""

import logging
from typing import Optional

from .entities import Customer, Page, Technician, page_offset
from .errors import (
    CustomerNotFoundError,
    DuplicateCustomerError,
    DuplicateTechnicianError,
    TechnicianNotFoundError,
)
from .persistence import PersistenceAdapter


logger = logging.getLogger(__name__)


DEFAULT_TECHNICIANS: list[dict] = [
    {"name": "Adams Usman", "email": "adams@yopmail.com", "phone": "08011111111"},
    {"name": "Faridah Adamu", "email": "faridah@yopmail.com", "phone": "08022222222"},
    {"name": "Yakubu Usman", "email": "yakubu@yopmail.com", "phone": "08033333333"},
    {"name": "Hilary Martins", "email": "hilary@yopmail.com", "phone": "08044444444"},
    {"name": "Samuel Oguju", "email": "sam@yopmail.com", "phone": "08055555555"},
]


class CustomerDirectory:
    def __init__(self, persistence: PersistenceAdapter):
        self.persistence = persistence

    def create(self, name: str, email: str, phone: str, address: str) -> Customer:
        """
        Register a customer.

        Raises:
            DuplicateCustomerError: Email and/or phone number already registered
        """
        customer = Customer.create(name=name, email=email, phone=phone, address=address)

        with self.persistence.transaction("create_customer") as tx:
            existing = self.persistence.find_customers_by_contact(
                customer.email, customer.phone, tx
            )
            if existing:
                fields = []
                if any(c.email == customer.email for c in existing):
                    fields.append("email")
                if any(c.phone == customer.phone for c in existing):
                    fields.append("phone")
                raise DuplicateCustomerError(fields)

            self.persistence.insert_customer(tx, customer)

        logger.info(f"[Directory] Customer created: {customer.customer_id} ({customer.email})")
        return customer

    def find_one(self, customer_id: str) -> Customer:
        customer = self.persistence.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer

    def find_all(self, page: int = 1, limit: int = 10) -> Page:
        items = self.persistence.list_customers(offset=page_offset(page, limit), limit=limit)
        return Page(items=items, total=self.persistence.count_customers(), page=page, limit=limit)


class TechnicianDirectory:
    def __init__(self, persistence: PersistenceAdapter):
        self.persistence = persistence

    def create(
        self,
        name: str,
        email: str,
        phone: str,
        role: str = "technician",
    ) -> Technician:
        technician = Technician.create(name=name, email=email, phone=phone, role=role)

        with self.persistence.transaction("create_technician") as tx:
            if self.persistence.find_technician_by_email(technician.email, tx) is not None:
                raise DuplicateTechnicianError(technician.email)
            self.persistence.insert_technician(tx, technician)

        logger.info(f"[Directory] Technician created: {technician.technician_id} ({technician.email})")
        return technician

    def seed_defaults(self, defaults: Optional[list[dict]] = None) -> list[Technician]:
        """
        Insert the default technicians, skipping emails already present.

        Returns:
            Technicians inserted by this call (empty when already seeded)
        """
        created = []
        with self.persistence.transaction("seed_technicians") as tx:
            for entry in defaults if defaults is not None else DEFAULT_TECHNICIANS:
                technician = Technician.create(
                    name=entry["name"],
                    email=entry["email"],
                    phone=entry["phone"],
                    role=entry.get("role", "technician"),
                )
                if self.persistence.find_technician_by_email(technician.email, tx) is not None:
                    continue
                self.persistence.insert_technician(tx, technician)
                created.append(technician)

        logger.info(f"[Directory] Seeded {len(created)} technician(s)")
        return created

    def find_one(self, technician_id: str) -> Technician:
        technician = self.persistence.get_technician(technician_id)
        if technician is None:
            raise TechnicianNotFoundError(technician_id)
        return technician

    def find_all(self, page: int = 1, limit: int = 10) -> Page:
        items = self.persistence.list_technicians(offset=page_offset(page, limit), limit=limit)
        return Page(items=items, total=self.persistence.count_technicians(), page=page, limit=limit)
