"""
Typed repositories over the entity manager.
"""
from garage.repositories.base import BaseRepository
from garage.repositories.customer import CustomerRepository
from garage.repositories.vehicle import VehicleRepository
from garage.repositories.repair import RepairRepository
from garage.repositories.user import UserRepository
from garage.repositories.mechanic import MechanicRepository
from garage.repositories.part import PartRepository
from garage.repositories.appointment import AppointmentRepository
from garage.repositories.invoice import InvoiceRepository
from garage.repositories.payment import PaymentRepository

__all__ = [
    "BaseRepository",
    "CustomerRepository",
    "VehicleRepository",
    "RepairRepository",
    "UserRepository",
    "MechanicRepository",
    "PartRepository",
    "AppointmentRepository",
    "InvoiceRepository",
    "PaymentRepository",
]
