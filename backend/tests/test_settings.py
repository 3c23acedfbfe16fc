"""Tests for the option store and the settings page API."""

from reviews_design.models import Option
from reviews_design.schemas.settings import CommentOrder, DefaultCommentsPage, ReviewSettings
from reviews_design.services.options import (
    COMMENTS_PER_PAGE_OPTION,
    SETTINGS_OPTION,
    THEME_PALETTE_OPTION,
    get_option,
    install_defaults,
    load_discussion_settings,
    load_review_settings,
    uninstall,
    update_option,
)


class TestOptionStore:
    def test_missing_settings_use_defaults(self, session):
        assert load_review_settings(session) == ReviewSettings()

    def test_malformed_settings_use_defaults(self, session):
        update_option(session, SETTINGS_OPTION, "not a document")
        assert load_review_settings(session) == ReviewSettings()

        update_option(session, SETTINGS_OPTION, {"allow_images": "maybe"})
        assert load_review_settings(session) == ReviewSettings()

    def test_invalid_discussion_settings_use_defaults(self, session):
        update_option(session, COMMENTS_PER_PAGE_OPTION, 0)

        assert load_discussion_settings(session).comments_per_page == 50

    def test_install_defaults_once(self, session):
        assert install_defaults(session) is True
        update_option(session, SETTINGS_OPTION, {"allow_images": True})

        assert install_defaults(session) is False
        assert load_review_settings(session).allow_images is True

    def test_uninstall_removes_only_settings(self, session, stored_settings):
        update_option(session, COMMENTS_PER_PAGE_OPTION, 10)

        uninstall(session)

        assert session.get(Option, SETTINGS_OPTION) is None
        assert get_option(session, COMMENTS_PER_PAGE_OPTION) == 10


class TestSettingsEndpoints:
    def test_get_defaults(self, client, manager_headers):
        response = client.get("/api/v1/settings", headers=manager_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["settings"]["allow_images"] is False
        assert data["settings"]["require_image_approval"] is True
        assert data["settings"]["colors"]["primary"] == "#5070ff"
        assert data["discussion"]["comments_per_page"] == 50
        assert data["base_palette"]["accent"] == "#fbbf24"

    def test_theme_palette_in_base_palette(self, client, session, manager_headers):
        update_option(session, THEME_PALETTE_OPTION, [{"slug": "primary", "color": "#123456"}])

        data = client.get("/api/v1/settings", headers=manager_headers).json()

        assert data["base_palette"]["primary"] == "#123456"
        assert data["settings"]["colors"]["primary"] == "#123456"

    def test_save_sanitizes_input(self, client, session, manager_headers):
        response = client.put(
            "/api/v1/settings",
            json={
                "allow_images": True,
                "images_subdir": "../uploads/../review pics",
                "colors": {"primary": "#ABC", "border": "javascript:alert(1)"},
                "comments_per_page": -5,
                "default_comments_page": "middle",
                "comment_order": "sideways",
            },
            headers=manager_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["settings"]["allow_images"] is True
        assert data["settings"]["show_website_field"] is False
        assert data["settings"]["images_subdir"] == "uploads/review-pics"
        assert data["settings"]["colors"]["primary"] == "#aabbcc"
        assert data["settings"]["colors"]["border"] == "#e5e7eb"
        assert data["discussion"]["comments_per_page"] == 1
        assert data["discussion"]["default_comments_page"] == DefaultCommentsPage.NEWEST.value
        assert data["discussion"]["comment_order"] == CommentOrder.ASC.value

        stored = get_option(session, SETTINGS_OPTION)
        assert set(stored["colors"]) == {"primary", "background", "border", "text", "accent"}

    def test_save_falls_back_on_non_string_choices(self, client, manager_headers):
        response = client.put(
            "/api/v1/settings",
            json={"comment_order": ["desc"], "default_comments_page": {"oldest": 1}},
            headers=manager_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["discussion"]["default_comments_page"] == DefaultCommentsPage.NEWEST.value
        assert data["discussion"]["comment_order"] == CommentOrder.ASC.value

    def test_save_discussion_settings(self, client, session, manager_headers):
        client.put(
            "/api/v1/settings",
            json={
                "enable_reviews": True,
                "page_comments": True,
                "comments_per_page": "5",
                "default_comments_page": "oldest",
                "comment_order": "desc",
            },
            headers=manager_headers,
        )

        discussion = load_discussion_settings(session)
        assert discussion.page_comments is True
        assert discussion.comments_per_page == 5
        assert discussion.default_comments_page == DefaultCommentsPage.OLDEST
        assert discussion.comment_order == CommentOrder.DESC
