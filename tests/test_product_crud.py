"""Tests de product_crud contra una base SQLite real."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from app.core.exceptions import NotFoundError
from app.crud import product_crud
from app.schemas.product_schema import ProductCreate, ProductListQuery


def _names(page):
    return [product.name for product in page.results]


class TestCreateProduct:

    @pytest.mark.parametrize("requested_qty", [999, -4, 10**9])
    async def test_qty_always_starts_at_zero(self, db, categories, requested_qty):
        product_in = ProductCreate.model_validate(
            {"name": "Widget", "description": "d", "category_id": "3", "price": "9.99", "qty": requested_qty}
        )

        product = await product_crud.create_product(db, product_in, image="abc.png")

        assert product.id is not None
        assert product.qty == 0
        assert product.image == "abc.png"
        assert float(product.price) == pytest.approx(9.99)
        assert product.created_at is not None
        assert product.updated_at is not None

    async def test_image_is_optional(self, db, categories):
        product_in = ProductCreate(name="Rake", category_id=2, price=0)

        product = await product_crud.create_product(db, product_in)

        assert product.image is None


class TestUpdateProduct:

    async def test_negative_qty_is_clamped_to_zero(self, db, make_product):
        product = await make_product("Hammer", qty=7)

        updated = await product_crud.update_product(db, product.id, {"qty": -5})

        assert updated.qty == 0

    async def test_only_supplied_fields_change(self, db, make_product):
        product = await make_product("Hammer", image="keep.png", price=5, qty=3)

        updated = await product_crud.update_product(db, product.id, {"name": "Sledgehammer", "qty": 4})

        assert updated.name == "Sledgehammer"
        assert updated.qty == 4
        assert updated.image == "keep.png"
        assert float(updated.price) == 5
        assert updated.description == "Hammer description"

    async def test_unknown_id_raises_not_found(self, db, categories):
        with pytest.raises(NotFoundError):
            await product_crud.update_product(db, 404, {"qty": 1})


class TestDeleteProduct:

    async def test_returns_deleted_row_with_image(self, db, make_product):
        product = await make_product("Saw", image="saw.jpg")

        deleted = await product_crud.delete_product(db, product.id)

        assert deleted.image == "saw.jpg"
        assert await product_crud.get_product(db, product.id) is None

    async def test_unknown_id_raises_not_found(self, db, categories):
        with pytest.raises(NotFoundError):
            await product_crud.delete_product(db, 404)


class TestListProducts:

    async def test_joins_category_name(self, db, make_product):
        await make_product("Drill", category_id=1)

        page = await product_crud.get_products(db, ProductListQuery())

        assert page.total == 1
        assert page.results[0].category == "Tools"
        assert page.results[0].category_id == 1

    async def test_sort_by_category_uses_category_name(self, db, make_product):
        await make_product("In tools", category_id=1)
        await make_product("In garden", category_id=2)
        await make_product("In appliances", category_id=3)

        page = await product_crud.get_products(db, ProductListQuery(sort="category"))

        assert _names(page) == ["In appliances", "In garden", "In tools"]

    async def test_sort_direction_desc(self, db, make_product):
        for name in ["b", "c", "a"]:
            await make_product(name)

        page = await product_crud.get_products(db, ProductListQuery(sort="name", sort_direction="desc"))

        assert _names(page) == ["c", "b", "a"]

    async def test_unknown_sort_column_falls_back_to_created_at(self, db, make_product):
        for name in ["first", "second"]:
            await make_product(name)

        page = await product_crud.get_products(db, ProductListQuery(sort="no_such_column; drop table"))

        assert _names(page) == ["first", "second"]

    async def test_search_is_case_insensitive_substring(self, db, make_product):
        for name in ["Cordless Drill", "drill bit", "Hammer"]:
            await make_product(name)

        page = await product_crud.get_products(db, ProductListQuery(search="DRILL", sort="name"))

        assert _names(page) == ["Cordless Drill", "drill bit"]
        assert page.total == 2

    async def test_empty_search_matches_everything(self, db, make_product):
        for name in ["x", "y"]:
            await make_product(name)

        page = await product_crud.get_products(db, ProductListQuery(search=""))

        assert page.total == 2

    async def test_pagination_slices_with_total(self, db, make_product):
        for index in range(5):
            await make_product(f"item-{index}")

        first = await product_crud.get_products(db, ProductListQuery(sort="name", page=0, limit=2))
        last = await product_crud.get_products(db, ProductListQuery(sort="name", page=2, limit=2))

        assert _names(first) == ["item-0", "item-1"]
        assert _names(last) == ["item-4"]
        assert first.total == last.total == 5
        assert (last.page, last.limit) == (2, 2)


class TestWidgetViews:

    async def test_keyword_search_uses_page_size_two_sorted_by_name(self, db, make_product):
        for name in ["Pump C", "Pump A", "Hose", "Pump B"]:
            await make_product(name)

        first = await product_crud.search_products_by_keyword(db, "pump", 0)
        second = await product_crud.search_products_by_keyword(db, "pump", 1)

        assert first.limit == 2
        assert _names(first) == ["Pump A", "Pump B"]
        assert _names(second) == ["Pump C"]
        assert first.total == 3

    async def test_sorted_by_updated_at(self, db, make_product):
        await make_product("late", updated_at=datetime(2024, 3, 1))
        await make_product("early", updated_at=datetime(2024, 1, 1))
        await make_product("middle", updated_at=datetime(2024, 2, 1))

        page = await product_crud.get_products_sorted_by(db, "updated_at", 0)

        assert _names(page) == ["early", "middle"]
        assert page.total == 3

    async def test_widget_views_do_not_need_a_category(self, db, make_product):
        await make_product("Orphan", category_id=99)
        await make_product("Placed", category_id=1)

        widget = await product_crud.get_products_sorted_by(db, "name", 0)
        listing = await product_crud.get_products(db, ProductListQuery(sort="name"))

        assert _names(widget) == ["Orphan", "Placed"]
        assert widget.results[0].category_id == 99
        assert widget.total == 2
        assert _names(listing) == ["Placed"]
        assert listing.total == 1


class TestListQueryBounds:

    def test_limit_above_integer_range_is_rejected(self):
        with pytest.raises(ValidationError):
            ProductListQuery(limit=2**31)

    def test_offset_above_bigint_range_is_rejected(self):
        with pytest.raises(ValidationError):
            ProductListQuery(page=2**62, limit=2)

    async def test_last_reachable_page_is_empty(self, db, make_product):
        await make_product("Only")

        page = await product_crud.get_products(db, ProductListQuery(page=(2**63 - 1) // 12, limit=12))

        assert page.results == []
        assert page.total == 1
