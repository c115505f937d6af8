"""SQL for the items_complete_view materialized view (PostgreSQL)"""

ITEMS_VIEW_NAME = 'items_complete_view'

DROP_ITEMS_VIEW_SQL = f'DROP MATERIALIZED VIEW IF EXISTS {ITEMS_VIEW_NAME}'

CREATE_ITEMS_VIEW_SQL = [
    f"""
    CREATE MATERIALIZED VIEW {ITEMS_VIEW_NAME} AS
    SELECT
        i.id,
        i.name,
        i.description,
        i.quantity,
        i.box_id,
        i.parent_item_id,
        i.group_id,
        i.supplier,
        i.qr_code,
        i.notes,
        i.additional_data,
        i.last_transaction_at,
        i.last_transaction_type,
        i.deleted_at,
        i.created_at,
        i.updated_at,
        COALESCE(i.type, ip.type) AS type,
        COALESCE(i.ean_code, ip.ean_code) AS ean_code,
        COALESCE(i.serial_number, ip.serial_number) AS serial_number,
        b.box_number,
        b.description AS box_description,
        l.name AS location_name,
        l.color AS location_color,
        s.name AS shelf_name,
        p.name AS parent_name
    FROM items i
    LEFT JOIN boxes b ON i.box_id = b.id
    LEFT JOIN locations l ON b.location_id = l.id
    LEFT JOIN shelves s ON b.shelf_id = s.id
    LEFT JOIN items p ON i.parent_item_id = p.id
    LEFT JOIN item_properties ip ON i.id = ip.item_id
    WHERE i.deleted_at IS NULL
    """,
    # A unique index is required for REFRESH ... CONCURRENTLY
    f'CREATE UNIQUE INDEX items_complete_view_id_idx ON {ITEMS_VIEW_NAME} (id)',
    f'CREATE INDEX items_complete_view_box_id_idx ON {ITEMS_VIEW_NAME} (box_id)',
    f'CREATE INDEX items_complete_view_parent_idx ON {ITEMS_VIEW_NAME} (parent_item_id)',
]
