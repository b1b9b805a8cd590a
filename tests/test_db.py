def test_can_create_set_and_item_rows(app, db):
    with app.app_context():
        from zaiko.models import InventoryItem, InventorySet

        inventory_set = InventorySet(name="Tools", name_key="tools")
        inventory_set.items.append(InventoryItem(name="Saw", name_key="saw", stock=2))
        db.session.add(inventory_set)
        db.session.commit()

        assert InventorySet.query.count() == 1
        assert InventoryItem.query.one().set_id == inventory_set.id


def test_deleting_a_set_row_cascades_to_items(app, db):
    with app.app_context():
        from zaiko.models import InventoryItem, InventorySet

        inventory_set = InventorySet(name="Tools", name_key="tools")
        inventory_set.items.append(InventoryItem(name="Saw", name_key="saw", stock=2))
        db.session.add(inventory_set)
        db.session.commit()

        db.session.delete(inventory_set)
        db.session.commit()

        assert InventoryItem.query.count() == 0
