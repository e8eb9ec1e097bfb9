"""Seed the database with sample content and its first versions."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cms.database import SessionLocal, engine, Base
import cms.models  # noqa: F401

from cms.models.user import User
from cms.services import content_service, content_version_service


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        # Users
        users = [
            User(email="admin@agency.test", name="관리자 김철수", role="admin"),
            User(email="editor@agency.test", name="에디터 이영희", role="editor"),
            User(email="author@agency.test", name="작성자 박민준", role="author"),
        ]
        db.add_all(users)
        db.commit()
        editor = users[1]

        # 인사이트: 초기본 -> 수정 -> 게시 -> 초안
        insight = content_service.create_content(
            db, "insight",
            {
                "title": "2026 웹 디자인 트렌드",
                "slug": "web-design-trends-2026",
                "excerpt": "올해 주목할 디자인 흐름을 정리했습니다.",
                "content": {"blocks": [{"type": "text", "body": "초안 본문"}]},
                "category": "design",
                "tags": ["design", "trends"],
                "reading_time": 5,
            },
            author_id=editor.user_id,
        )
        insight_id = insight["content_id"]
        content_service.update_content(
            db, "insight", insight_id,
            {"content": {"blocks": [{"type": "text", "body": "검수 완료 본문"}]}, "reading_time": 6},
            author_id=editor.user_id,
            change_notes="본문 검수 반영",
        )
        content_version_service.publish(db, "insight", insight_id, 2)
        content_version_service.create_draft(
            db, "insight", insight_id,
            {"title": "2026 웹 디자인 트렌드 (개정판)"},
            author_id=users[2].user_id,
            change_notes="제목 개정안",
        )

        portfolio = content_service.create_content(
            db, "portfolio",
            {
                "title": "브랜드 리뉴얼 프로젝트",
                "slug": "brand-renewal",
                "client": "A사",
                "project_date": "2026-02-15",
                "technologies": ["Figma", "Next.js"],
            },
            author_id=editor.user_id,
        )
        content_version_service.publish(db, "portfolio", portfolio["content_id"], 1)

        service = content_service.create_content(
            db, "service",
            {"title": "검색 최적화", "slug": "seo", "icon": "search", "price_range": "₩3,000,000~"},
            author_id=users[0].user_id,
        )

        print("Seed data inserted successfully.")
        print(f"  Users: {len(users)}")
        print(f"  Insight: ID={insight_id}")
        print(f"  Portfolio: ID={portfolio['content_id']}")
        print(f"  Service: ID={service['content_id']}")
        print()
        print("Test login emails:")
        for u in users:
            print(f"  email={u.email}  role={u.role}  name={u.name}")

    except Exception as e:
        db.rollback()
        raise e
    finally:
        db.close()


if __name__ == "__main__":
    seed()
