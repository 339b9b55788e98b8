"""Usage keys and the reverse key index."""

from collections.abc import Callable, Iterable, Sequence

from schemas.asset import ImageAsset
from schemas.manifest import KeyGroup, KeyGroupImage
from schemas.usage import ComponentRef

KEY_SEPARATOR = "."


def build_usage_key(
    component_hierarchy: Sequence[ComponentRef],
    content_type_title: str,
    field_name: str,
    title_lookup: Callable[[str], str],
) -> str:
    """Build the breadcrumb key for a usage.

    The key reads from the content type, through each enclosing component
    (outermost first), down to the field: ``Blog Post.Hero Component.image``.
    Two usages share a key exactly when they share all three parts.

    Args:
        component_hierarchy: Enclosing components, outermost first
        content_type_title: Display title of the entry's content type
        field_name: Field that directly holds the asset
        title_lookup: Resolves a component uid to its display title
    """
    parts = [content_type_title]
    parts.extend(title_lookup(component.uid) for component in component_hierarchy)
    parts.append(field_name)
    return KEY_SEPARATOR.join(parts)


def build_key_groups(images: Iterable[ImageAsset]) -> dict[str, KeyGroup]:
    """Index analyzed images by usage key, sorted by key.

    ``image_count`` counts every usage under the key while ``images`` lists
    each image once, in the order images were given.
    """
    groups: dict[str, KeyGroup] = {}

    for image in images:
        for usage in image.usages or []:
            group = groups.get(usage.key)
            if group is None:
                group = KeyGroup(
                    key=usage.key,
                    content_type_uid=usage.content_type_uid,
                    content_type_title=usage.content_type_title,
                    component_hierarchy=list(usage.component_hierarchy),
                    field_name=usage.field_name,
                )
                groups[usage.key] = group

            group.image_count += 1
            if not any(
                entry.uid == image.uid and entry.locale == image.locale
                for entry in group.images
            ):
                group.images.append(
                    KeyGroupImage(
                        uid=image.uid,
                        filename=image.filename,
                        url=image.url,
                        locale=image.locale,
                    )
                )

    return dict(sorted(groups.items()))
