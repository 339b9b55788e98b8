"""Contentstack Management API client."""

from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from schemas.asset import Asset, Locale
from schemas.usage import TypeInfo

from .client import Client
from .exceptions import ValidationError

DEFAULT_BASE_URL = "https://api.contentstack.io/v3"


class ContentstackClient(Client):
    """Async client for the Contentstack Management API (v3).

    Exposes the calls the ALT text workflow needs: locales, asset listing,
    asset references, entry and content type lookups, and asset updates.
    Authentication uses the stack API key and a management token, both
    sent as headers.

    Example:
        config = build_client_config(api_key, management_token)
        async with ContentstackClient(config) as client:
            assets = await client.list_assets("en-us", skip=0, limit=100)
    """

    DEFAULT_PAGE_SIZE = 100

    async def fetch(
        self,
        locale: str,
        skip: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[Asset]:
        """Fetch one page of assets for a locale."""
        return await self.list_assets(locale, skip=skip, limit=limit)

    async def list_locales(self) -> list[Locale]:
        """List the locales configured on the stack.

        Raises:
            ValidationError: If the response fails schema validation
            APIError: If the API returns a non-2xx response
            ConnectionError: If the network connection fails
        """
        data = await self.get_json("/locales")
        return self._validate_items(self._member(data, "locales", list, "/locales"), Locale)

    async def list_assets(
        self,
        locale: str,
        skip: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[Asset]:
        """List one page of assets.

        Args:
            locale: Locale code to query assets in
            skip: Number of assets to skip
            limit: Page size (Contentstack caps this at 100)

        Returns:
            Validated Asset objects for the page
        """
        params = {
            "locale": locale,
            "skip": skip,
            "limit": limit,
            "include_count": "true",
        }
        data = await self.get_json("/assets", params=params)
        return self._validate_items(self._member(data, "assets", list, "/assets"), Asset)

    async def get_asset_references(self, asset_uid: str) -> Any:
        """Return the raw "what references this asset" payload.

        The payload shape varies between API versions (a bare list, or an
        object with ``references`` or ``items``); callers normalize it.
        """
        return await self.get_json(f"/assets/{asset_uid}/references")

    async def fetch_entry(
        self, content_type_uid: str, entry_uid: str, locale: str
    ) -> dict[str, Any]:
        """Fetch the full entry document for a locale."""
        data = await self.get_json(
            f"/content_types/{content_type_uid}/entries/{entry_uid}",
            params={"locale": locale},
        )
        entry = data.get("entry", data) if isinstance(data, dict) else data
        if not isinstance(entry, dict):
            raise ValidationError(
                f"Entry {entry_uid} of {content_type_uid} is not an object"
            )
        return entry

    async def fetch_content_type_info(self, content_type_uid: str) -> TypeInfo:
        """Fetch the uid and display title of a content type."""
        data = await self.get_json(f"/content_types/{content_type_uid}")
        content_type = self._member(data, "content_type", dict, f"content type {content_type_uid}")
        return TypeInfo(
            uid=content_type.get("uid") or content_type_uid,
            title=content_type.get("title") or content_type_uid,
        )

    async def fetch_component_info(self, component_uid: str) -> TypeInfo:
        """Fetch the uid and display title of an embedded component.

        Components embedded in entries carry their own content type uid,
        so their metadata lives behind the content type endpoint.
        """
        return await self.fetch_content_type_info(component_uid)

    async def fetch_asset(self, asset_uid: str, locale: str) -> Asset:
        """Fetch a single asset in a locale."""
        data = await self.get_json(f"/assets/{asset_uid}", params={"locale": locale})
        asset = self._member(data, "asset", dict, f"asset {asset_uid}")
        return self._validate_items([asset], Asset)[0]

    async def update_asset(
        self,
        asset_uid: str,
        locale: str,
        description: str,
        tags: list[str],
    ) -> Asset:
        """Update an asset's description and tags for a locale."""
        payload = {"asset": {"description": description, "tags": tags}}
        response = await self.put(
            f"/assets/{asset_uid}",
            params={"locale": locale},
            json=payload,
        )
        data = self._decode_json(response)
        asset = self._member(data, "asset", dict, f"asset {asset_uid}")
        return self._validate_items([asset], Asset)[0]

    def _validate_items(
        self, items: list[dict[str, Any]], model: type[BaseModel]
    ) -> list:
        """Validate raw items against a schema.

        Raises:
            ValidationError: If any item fails validation
        """
        validated = []

        for i, item in enumerate(items):
            try:
                validated.append(model.model_validate(item))
            except PydanticValidationError as e:
                item_id = item.get("uid", f"index {i}") if isinstance(item, dict) else f"index {i}"
                raise ValidationError(
                    f"{model.__name__} {item_id} failed validation",
                    errors=[str(err) for err in e.errors()],
                ) from e

        return validated

    def _member(self, data: Any, key: str, expected: type, what: str) -> Any:
        """Return ``data[key]``, checking the response shape.

        A missing or null member reads as an empty ``expected`` value.

        Raises:
            ValidationError: If the body is not an object or the member has the wrong type
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Response for {what} is not an object")
        value = data.get(key)
        if value is None:
            return expected()
        if not isinstance(value, expected):
            raise ValidationError(
                f"Response for {what} has an invalid '{key}' ({type(value).__name__})"
            )
        return value
