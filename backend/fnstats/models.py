from sqlalchemy import Column, String, Float, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from .database import Base

class EventWindow(Base):
    __tablename__ = "event_windows"
    event_window_id = Column(String(128), primary_key=True)
    discovered_at = Column(DateTime, nullable=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    total_matches = Column(Integer, nullable=False, default=0)
    processed_matches = Column(Integer, nullable=False, default=0)
    matches = relationship("Match", back_populates="event_window", cascade="all, delete-orphan")

class Match(Base):
    __tablename__ = "matches"
    match_id = Column(String(128), primary_key=True)
    event_window_id = Column(String(128), ForeignKey("event_windows.event_window_id", ondelete="CASCADE"),
                             nullable=False, index=True)
    start_time = Column(DateTime, nullable=True)
    event_window = relationship("EventWindow", back_populates="matches")
    players = relationship("MatchPlayer", back_populates="match", cascade="all, delete-orphan")

class MatchPlayer(Base):
    # one row per player per match; id is the raw actor key events refer to
    __tablename__ = "match_players"
    id = Column(String(128), primary_key=True)
    match_id = Column(String(128), ForeignKey("matches.match_id", ondelete="CASCADE"), nullable=False, index=True)
    epic_id = Column(String(64), nullable=True, index=True)
    epic_username = Column(String(64), nullable=True)
    match = relationship("Match", back_populates="players")

class Weapon(Base):
    __tablename__ = "weapons"
    id = Column(Integer, primary_key=True, autoincrement=True)
    event_window_id = Column(String(128), ForeignKey("event_windows.event_window_id", ondelete="CASCADE"),
                             nullable=False, index=True)
    weapon_id = Column(String(128), nullable=False)
    weapon_type = Column(String(64), nullable=True)

class EliminationEvent(Base):
    __tablename__ = "elimination_events"
    id = Column(Integer, primary_key=True, autoincrement=True)
    match_id = Column(String(128), ForeignKey("matches.match_id", ondelete="CASCADE"), nullable=False)
    actor_id = Column(String(128), nullable=False)
    recipient_id = Column(String(128), nullable=True)
    weapon_type = Column(String(64), nullable=True)
    game_time_seconds = Column(Float, nullable=False)
    distance = Column(Float, nullable=False)  # storage units, 100 per meter
    __table_args__ = (Index("ix_elim_match_actor", "match_id", "actor_id"),)

class DamageDealtEvent(Base):
    __tablename__ = "damage_dealt_events"
    id = Column(Integer, primary_key=True, autoincrement=True)
    match_id = Column(String(128), ForeignKey("matches.match_id", ondelete="CASCADE"), nullable=False)
    actor_id = Column(String(128), nullable=False)
    recipient_id = Column(String(128), nullable=False)
    amount = Column(Float, nullable=False, default=0.0)
    weapon_type = Column(String(64), nullable=True)
    game_time_seconds = Column(Float, nullable=False)
    distance = Column(Float, nullable=False)
    __table_args__ = (
        Index("ix_dmg_match_actor", "match_id", "actor_id"),
        Index("ix_dmg_match_recipient", "match_id", "recipient_id"),
    )
