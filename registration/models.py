import uuid
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

from shared.registration_status import RegistrationStatus, describe
from .categories import calculate_age, calculate_category

db = SQLAlchemy()


def generate_uuid() -> str:
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


class Tournament(db.Model):
    __tablename__ = 'tournaments'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    name = db.Column(db.String(200), nullable=False)
    short_name = db.Column(db.String(100), nullable=False)
    type = db.Column(db.String(50), nullable=False)  # TournamentType value
    description = db.Column(db.Text, nullable=True)
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    location = db.Column(db.String(200), nullable=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    choreographies = db.relationship('Choreography', back_populates='tournament', cascade='all, delete-orphan')
    coaches = db.relationship('Coach', back_populates='tournament', cascade='all, delete-orphan')
    judges = db.relationship('Judge', back_populates='tournament', cascade='all, delete-orphan')
    support_staff = db.relationship('SupportStaff', back_populates='tournament', cascade='all, delete-orphan')

    def to_summary(self):
        return {
            'id': self.id,
            'name': self.name,
            'shortName': self.short_name,
            'type': self.type,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'shortName': self.short_name,
            'type': self.type,
            'description': self.description,
            'startDate': _iso(self.start_date),
            'endDate': _iso(self.end_date),
            'location': self.location,
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
        }


choreography_gymnasts = db.Table(
    'choreography_gymnasts',
    db.Column('choreography_id', db.String(36), db.ForeignKey('choreographies.id'), primary_key=True),
    db.Column('gymnast_id', db.String(36), db.ForeignKey('gymnasts.id'), primary_key=True),
)


class Gymnast(db.Model):
    __tablename__ = 'gymnasts'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    fig_id = db.Column(db.String(50), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    full_name = db.Column(db.String(200), nullable=False)
    gender = db.Column(db.String(10), nullable=True)
    country = db.Column(db.String(3), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=True)
    discipline = db.Column(db.String(10), default='AER')
    license_valid = db.Column(db.Boolean, default=True)
    license_expiry_date = db.Column(db.Date, nullable=True)
    is_local = db.Column(db.Boolean, default=False)  # Created here, absent from the FIG registry
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    choreographies = db.relationship('Choreography', secondary=choreography_gymnasts, back_populates='gymnasts')

    @property
    def age(self):
        if not self.date_of_birth:
            return None
        return calculate_age(self.date_of_birth)

    @property
    def category(self):
        age = self.age
        return calculate_category(age).value if age is not None else None

    def to_dict(self):
        return {
            'id': self.id,
            'figId': self.fig_id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'fullName': self.full_name,
            'gender': self.gender,
            'country': self.country,
            'dateOfBirth': _iso(self.date_of_birth),
            'discipline': self.discipline,
            'licenseValid': self.license_valid,
            'licenseExpiryDate': _iso(self.license_expiry_date),
            'age': self.age,
            'category': self.category,
            'isLocal': self.is_local,
        }


class Choreography(db.Model):
    __tablename__ = 'choreographies'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    name = db.Column(db.String(200), nullable=False)
    country = db.Column(db.String(3), nullable=False, index=True)
    category = db.Column(db.String(10), nullable=False)
    type = db.Column(db.String(10), nullable=False)
    gymnast_count = db.Column(db.Integer, nullable=False)
    oldest_gymnast_age = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=RegistrationStatus.PENDING.value)
    tournament_id = db.Column(db.String(36), db.ForeignKey('tournaments.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tournament = db.relationship('Tournament', back_populates='choreographies')
    gymnasts = db.relationship('Gymnast', secondary=choreography_gymnasts, back_populates='choreographies')

    @property
    def display_name(self):
        return self.name

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'country': self.country,
            'category': self.category,
            'type': self.type,
            'gymnastCount': self.gymnast_count,
            'oldestGymnastAge': self.oldest_gymnast_age,
            'notes': self.notes,
            'status': self.status,
            'statusDescription': describe(RegistrationStatus(self.status)) if self.status else None,
            'tournament': self.tournament.to_summary() if self.tournament else None,
            'gymnasts': [g.to_dict() for g in self.gymnasts],
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class Coach(db.Model):
    __tablename__ = 'coaches'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    fig_id = db.Column(db.String(50), nullable=False, index=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    full_name = db.Column(db.String(200), nullable=False)
    gender = db.Column(db.String(10), nullable=True)
    country = db.Column(db.String(3), nullable=False, index=True)
    club = db.Column(db.String(200), nullable=True)
    level = db.Column(db.String(50), nullable=True)
    level_description = db.Column(db.String(200), nullable=True)
    tournament_id = db.Column(db.String(36), db.ForeignKey('tournaments.id'), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=RegistrationStatus.PENDING.value)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tournament = db.relationship('Tournament', back_populates='coaches')

    __table_args__ = (
        db.UniqueConstraint('fig_id', 'tournament_id', name='unique_coach_per_tournament'),
    )

    @property
    def display_name(self):
        return self.full_name

    def to_dict(self):
        return {
            'id': self.id,
            'figId': self.fig_id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'fullName': self.full_name,
            'gender': self.gender,
            'country': self.country,
            'club': self.club,
            'level': self.level,
            'levelDescription': self.level_description,
            'status': self.status,
            'notes': self.notes,
            'tournament': self.tournament.to_summary() if self.tournament else None,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class Judge(db.Model):
    __tablename__ = 'judges'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    fig_id = db.Column(db.String(50), nullable=False, index=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    full_name = db.Column(db.String(200), nullable=False)
    birth = db.Column(db.String(20), nullable=True)
    gender = db.Column(db.String(10), nullable=True)
    country = db.Column(db.String(3), nullable=False, index=True)
    category = db.Column(db.String(50), nullable=True)
    category_description = db.Column(db.String(200), nullable=True)
    tournament_id = db.Column(db.String(36), db.ForeignKey('tournaments.id'), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=RegistrationStatus.PENDING.value)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tournament = db.relationship('Tournament', back_populates='judges')

    __table_args__ = (
        db.UniqueConstraint('fig_id', 'tournament_id', name='unique_judge_per_tournament'),
    )

    @property
    def display_name(self):
        return self.full_name

    def to_dict(self):
        return {
            'id': self.id,
            'figId': self.fig_id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'fullName': self.full_name,
            'birth': self.birth,
            'gender': self.gender,
            'country': self.country,
            'category': self.category,
            'categoryDescription': self.category_description,
            'status': self.status,
            'notes': self.notes,
            'tournament': self.tournament.to_summary() if self.tournament else None,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class SupportStaff(db.Model):
    """Delegation staff (leader, medic, companion); identified by name, not fig id."""
    __tablename__ = 'support_staff'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    full_name = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(30), nullable=False)  # SupportRole value
    gender = db.Column(db.String(10), nullable=True)
    country = db.Column(db.String(3), nullable=False, index=True)
    club = db.Column(db.String(200), nullable=True)
    email = db.Column(db.String(200), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    tournament_id = db.Column(db.String(36), db.ForeignKey('tournaments.id'), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=RegistrationStatus.PENDING.value)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tournament = db.relationship('Tournament', back_populates='support_staff')

    @property
    def display_name(self):
        return self.full_name

    def to_dict(self):
        return {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'fullName': self.full_name,
            'role': self.role,
            'gender': self.gender,
            'country': self.country,
            'club': self.club,
            'email': self.email,
            'phone': self.phone,
            'status': self.status,
            'notes': self.notes,
            'tournament': self.tournament.to_summary() if self.tournament else None,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class LocalCoach(db.Model):
    """Coach profile created here because the FIG registry does not list them."""
    __tablename__ = 'local_coaches'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    fig_id = db.Column(db.String(50), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    full_name = db.Column(db.String(200), nullable=False)
    gender = db.Column(db.String(10), nullable=False)
    country = db.Column(db.String(3), nullable=False, index=True)
    club = db.Column(db.String(200), nullable=True)
    level = db.Column(db.String(50), nullable=False)
    level_description = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'figId': self.fig_id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'fullName': self.full_name,
            'gender': self.gender,
            'country': self.country,
            'club': self.club,
            'discipline': 'AER',
            'level': self.level,
            'levelDescription': self.level_description,
            'isLocal': True,
        }
