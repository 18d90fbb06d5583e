# models/__init__.py
from models.profile import Profile
from models.creative_work import CreativeWork
from models.license_offering import LicenseOffering
from models.order import Order
from models.license import License
from models.royalty_split import RoyaltySplit
from models.royalty_distribution import RoyaltyDistribution
from models.database import Base, build_engine, build_sessionmaker, get_session, standalone_session

__all__ = [
    "Profile",
    "CreativeWork",
    "LicenseOffering",
    "Order",
    "License",
    "RoyaltySplit",
    "RoyaltyDistribution",
    "Base",
    "build_engine",
    "build_sessionmaker",
    "get_session",
    "standalone_session",
]
