"""Tests for usage keys and the reverse key index."""

from cms_alt_text.usage.keys import build_key_groups, build_usage_key
from schemas.usage import ComponentRef, ResolvedComponent, UsageSummary


def make_usage(key, content_type_uid="blog_post", field_name="image", entry_uid="post_1"):
    return UsageSummary(
        content_type_uid=content_type_uid,
        content_type_title=key.split(".")[0],
        entry_uid=entry_uid,
        locale="en-us",
        field_name=field_name,
        key=key,
    )


class TestBuildUsageKey:
    """Tests for build_usage_key."""

    def test_single_component(self):
        """Content type, component title and field are joined with dots."""
        titles = {"cpt_hero": "Hero Component"}
        chain = [ComponentRef(uid="cpt_hero", field_name="hero")]

        key = build_usage_key(chain, "Blog Post", "heroImage", titles.get)

        assert key == "Blog Post.Hero Component.heroImage"

    def test_no_components(self):
        """Without components the key is content type and field."""
        key = build_usage_key([], "Blog Post", "coverImage", lambda uid: uid)

        assert key == "Blog Post.coverImage"

    def test_outermost_component_first(self):
        """Components appear outermost first."""
        titles = {"cpt_banner": "Banner", "cpt_slide": "Slide"}
        chain = [
            ComponentRef(uid="cpt_banner", field_name="modules"),
            ComponentRef(uid="cpt_slide", field_name="slides"),
        ]

        key = build_usage_key(chain, "Landing Page", "image", titles.get)

        assert key == "Landing Page.Banner.Slide.image"

    def test_lookup_fallback(self):
        """The lookup decides the fallback for unknown components."""
        chain = [ComponentRef(uid="cpt_unknown", field_name="block")]

        key = build_usage_key(chain, "Page", "image", lambda uid: {}.get(uid, uid))

        assert key == "Page.cpt_unknown.image"

    def test_resolved_components_are_accepted(self):
        """Resolved components work as chain entries too."""
        chain = [ResolvedComponent(uid="cpt_hero", title="Hero", field_name="hero")]

        key = build_usage_key(chain, "Page", "image", {"cpt_hero": "Hero"}.get)

        assert key == "Page.Hero.image"


class TestBuildKeyGroups:
    """Tests for build_key_groups."""

    def test_groups_images_by_key(self, make_image):
        """Images sharing a key are listed under one group."""
        first = make_image("img_1", usages=[make_usage("Blog Post.image")])
        second = make_image("img_2", usages=[make_usage("Blog Post.image", entry_uid="post_2")])

        groups = build_key_groups([first, second])

        assert list(groups) == ["Blog Post.image"]
        group = groups["Blog Post.image"]
        assert group.image_count == 2
        assert [image.uid for image in group.images] == ["img_1", "img_2"]
        assert group.content_type_uid == "blog_post"
        assert group.field_name == "image"

    def test_repeated_usage_counts_once_per_image_listing(self, make_image):
        """Two usages of one image under a key count twice but list the image once."""
        image = make_image(
            "img_1",
            usages=[
                make_usage("Blog Post.image", entry_uid="post_1"),
                make_usage("Blog Post.image", entry_uid="post_2"),
            ],
        )

        group = build_key_groups([image])["Blog Post.image"]

        assert group.image_count == 2
        assert len(group.images) == 1

    def test_same_asset_in_two_locales_listed_twice(self, make_image):
        """Locale variants of an asset are separate workflow images."""
        english = make_image("img_1", locale="en-us", usages=[make_usage("Blog Post.image")])
        french = make_image("img_1", locale="fr-fr", usages=[make_usage("Blog Post.image")])

        group = build_key_groups([english, french])["Blog Post.image"]

        assert [image.locale for image in group.images] == ["en-us", "fr-fr"]

    def test_keys_are_sorted(self, make_image):
        """Groups are ordered by key."""
        image = make_image(
            "img_1",
            usages=[
                make_usage("Page.image", content_type_uid="page"),
                make_usage("Article.hero", content_type_uid="article"),
            ],
        )

        assert list(build_key_groups([image])) == ["Article.hero", "Page.image"]

    def test_unused_and_unanalyzed_images_are_ignored(self, make_image):
        """Images without usages contribute no groups."""
        assert build_key_groups([make_image("img_1", usages=[]), make_image("img_2")]) == {}
