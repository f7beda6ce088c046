from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Numeric, Date, DateTime, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _decimal_str(value):
    return str(value) if value is not None else None


class Auction(Base):
    __tablename__ = 'auctions'
    __table_args__ = (
        # Natural key used for deduplication
        UniqueConstraint('auction_date', 'production_month', name='uq_auction_natural_key'),
    )

    auction_id = Column(Integer, primary_key=True)
    auction_date = Column(Date, nullable=False)
    production_month = Column(String, nullable=False)
    reserve_price = Column(Numeric(10, 4))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    regions = relationship(
        'AuctionRegion',
        back_populates='auction',
        cascade='all, delete-orphan',
        order_by='AuctionRegion.region_id',
    )
    technologies = relationship(
        'AuctionTechnology',
        back_populates='auction',
        cascade='all, delete-orphan',
        order_by='AuctionTechnology.technology_id',
    )

    def to_dict(self, include_details: bool = True) -> dict:
        data = {
            'auction_id': self.auction_id,
            'auction_date': self.auction_date.isoformat() if self.auction_date else None,
            'production_month': self.production_month,
            'reserve_price': _decimal_str(self.reserve_price),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_details:
            data['regions'] = [region.to_dict() for region in self.regions]
            data['technologies'] = [tech.to_dict() for tech in self.technologies]
        return data

    def __repr__(self):
        return f"<Auction(date={self.auction_date}, month='{self.production_month}')>"


class AuctionRegion(Base):
    __tablename__ = 'auction_regions'

    region_id = Column(Integer, primary_key=True)
    auction_id = Column(
        Integer, ForeignKey('auctions.auction_id', ondelete='CASCADE'), nullable=False
    )
    region_name = Column(String, nullable=False)
    volume_offered = Column(Integer, nullable=False)
    volume_allocated = Column(Integer, nullable=False)
    weighted_avg_price = Column(Numeric(10, 4), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    auction = relationship('Auction', back_populates='regions')

    def to_dict(self) -> dict:
        return {
            'region_name': self.region_name,
            'volume_offered': self.volume_offered,
            'volume_allocated': self.volume_allocated,
            'weighted_avg_price': _decimal_str(self.weighted_avg_price),
        }

    def __repr__(self):
        return f"<AuctionRegion(name='{self.region_name}', allocated={self.volume_allocated})>"


class AuctionTechnology(Base):
    __tablename__ = 'auction_technologies'

    technology_id = Column(Integer, primary_key=True)
    auction_id = Column(
        Integer, ForeignKey('auctions.auction_id', ondelete='CASCADE'), nullable=False
    )
    technology_type = Column(String, nullable=False)
    volume_offered = Column(Integer, nullable=False)
    volume_allocated = Column(Integer, nullable=False)
    weighted_avg_price = Column(Numeric(10, 4), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    auction = relationship('Auction', back_populates='technologies')

    def to_dict(self) -> dict:
        return {
            'technology_type': self.technology_type,
            'volume_offered': self.volume_offered,
            'volume_allocated': self.volume_allocated,
            'weighted_avg_price': _decimal_str(self.weighted_avg_price),
        }

    def __repr__(self):
        return f"<AuctionTechnology(type='{self.technology_type}', allocated={self.volume_allocated})>"
