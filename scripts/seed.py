#!/usr/bin/env python3
"""Seed a development database with staff accounts, centers and games.

Safe to run repeatedly: existing rows (matched by email or name) are
updated instead of duplicated.
"""

import os
import sys

# Add parent directory to path to import couplegames
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from couplegames import create_app, db
from couplegames.constants.roles import Role
from couplegames.constants.statuses import GameInstanceStatus
from couplegames.models import Center, Game, GameInstance, User

SEED_PASSWORD = os.getenv('SEED_PASSWORD', 'Coordinator123!')

STAFF = [
    {'key': 'admin', 'name': 'מנהל מערכת', 'email': 'admin@couplegames.co.il',
     'phone': '050-1111111', 'roles': [Role.ADMIN, Role.USER]},
    {'key': 'super', 'name': 'דוד לוי', 'email': 'david.super@couplegames.co.il',
     'phone': '050-2222222', 'roles': [Role.SUPER_COORDINATOR, Role.USER]},
    {'key': 'jerusalem', 'name': 'שרה כהן', 'email': 'sarah.coord@couplegames.co.il',
     'phone': '050-3333333', 'roles': [Role.CENTER_COORDINATOR, Role.USER]},
    {'key': 'haifa', 'name': 'מיכל אברהם', 'email': 'michal.coord@couplegames.co.il',
     'phone': '050-4444444', 'roles': [Role.CENTER_COORDINATOR, Role.USER]},
]

CENTERS = [
    {'name': 'ירושלים - בית ישראל', 'city': 'ירושלים', 'area': 'JERUSALEM',
     'latitude': 31.7683, 'longitude': 35.2137, 'coordinator': 'jerusalem'},
    {'name': 'תל אביב - צפון', 'city': 'תל אביב', 'area': 'CENTER',
     'latitude': 32.0853, 'longitude': 34.7818, 'coordinator': None},
    {'name': 'חיפה', 'city': 'חיפה', 'area': 'NORTH',
     'latitude': 32.7940, 'longitude': 34.9896, 'coordinator': 'haifa'},
    {'name': 'באר שבע', 'city': 'באר שבע', 'area': 'SOUTH',
     'latitude': 31.2518, 'longitude': 34.7915, 'coordinator': None},
]

GAMES = [
    {'name': 'So do you (סו דו יו)', 'category': 'COMMUNICATION', 'target_audience': 'GENERAL',
     'description': 'משחק שאלות חווייתי המחולק ל-6 קטגוריות של שאלות, חלקן קלילות וחלקן עמוקות.'},
    {'name': 'Time Out (טיים אאוט)', 'category': 'FUN', 'target_audience': 'GENERAL',
     'description': 'משחק שאלות על עבר, הווה ועתיד.'},
    {'name': 'תכירותי', 'category': 'FUN', 'target_audience': 'SINGLES',
     'description': 'משחק שאלות וסיטואציות משעשע וכיפי.'},
    {'name': 'כרטישיח', 'category': 'COMMUNICATION', 'target_audience': 'MARRIED',
     'description': 'ערכת קלפים עם 92 שאלות בנושאים שונים.'},
    {'name': 'לראות את היחסים', 'category': 'THERAPY', 'target_audience': 'MARRIED',
     'description': 'משחק שיח זוגי המבוסס על עקרונות CBT.'},
    {'name': 'Points Of You', 'category': 'PERSONAL_DEVELOPMENT', 'target_audience': 'GENERAL',
     'description': 'משחק פוטותרפיה צבעוני ודינמי.'},
]


def _upsert_staff():
    users = {}
    for data in STAFF:
        user = User.query.filter_by(email=data['email']).first()
        if not user:
            user = User(email=data['email'])
            db.session.add(user)
            print(f"  Added: {data['email']}")
        else:
            print(f"  Updated: {data['email']}")
        user.name = data['name']
        user.phone = data['phone']
        user.role_set = data['roles']
        user.is_active = True
        user.set_password(SEED_PASSWORD)
        users[data['key']] = user
    db.session.flush()
    return users


def _upsert_centers(users):
    centers = []
    for data in CENTERS:
        center = Center.query.filter_by(name=data['name']).first()
        if not center:
            center = Center(name=data['name'])
            db.session.add(center)
        center.city = data['city']
        center.area = data['area']
        center.latitude = data['latitude']
        center.longitude = data['longitude']
        center.is_active = True
        center.super_coordinator_id = users['super'].id
        coordinator = users.get(data['coordinator'])
        center.coordinator_id = coordinator.id if coordinator else None
        centers.append(center)
    db.session.flush()
    return centers


def _upsert_games():
    games = []
    for data in GAMES:
        game = Game.query.filter_by(name=data['name']).first()
        if not game:
            game = Game(name=data['name'])
            db.session.add(game)
        game.description = data['description']
        game.category = data['category']
        game.target_audience = data['target_audience']
        games.append(game)
    db.session.flush()
    return games


def _ensure_instances(centers, games):
    added = 0
    for center in centers:
        for game in games:
            exists = GameInstance.query.filter_by(center_id=center.id, game_id=game.id).first()
            if not exists:
                db.session.add(GameInstance(
                    center_id=center.id,
                    game_id=game.id,
                    status=GameInstanceStatus.AVAILABLE.value,
                ))
                added += 1
    return added


def seed():
    app = create_app()

    with app.app_context():
        print("Seeding staff accounts...")
        users = _upsert_staff()
        print("Seeding centers...")
        centers = _upsert_centers(users)
        print("Seeding games...")
        games = _upsert_games()
        added = _ensure_instances(centers, games)
        db.session.commit()

        print(f"\nSeeding complete: {len(users)} staff, {len(centers)} centers, "
              f"{len(games)} games, {added} new copies")


if __name__ == '__main__':
    seed()
