# --- SQL Logic Fragments ---

# Single-line postal address for a property aliased as `p`.
# Suffix and address line 2 are only included when non-empty.
FULL_ADDRESS_SQL = """(
    p.address_number || ' ' || p.street_name
    || COALESCE(' ' || NULLIF(p.street_suffix, ''), '')
    || CASE WHEN p.address_line2 IS NOT NULL AND p.address_line2 <> '' THEN ', ' || p.address_line2 ELSE '' END
    || ', ' || p.city || ' ' || p.zip_code
)"""

# Current ownership row per property: an open-ended row wins,
# otherwise the latest end year, then the latest start year.
CURRENT_OWNERSHIP_CTE = """
current_ownership AS (
    SELECT
        ownership_id,
        property_id,
        owner_id,
        ROW_NUMBER() OVER (
            PARTITION BY property_id
            ORDER BY
                (ownership_end_year IS NULL) DESC,
                ownership_end_year DESC,
                ownership_start_year DESC,
                ownership_id DESC
        ) as recency
    FROM ownership
)
"""

# 1. Ownership Turnover
# Properties owned only once are filtered out by the HAVING clause, so
# the average only covers properties that actually changed hands.
OWNERSHIP_TURNOVER_SQL = """
WITH ownership_counts AS (
    SELECT
        p.property_id,
        n.neighborhood_name,
        COUNT(ow.ownership_id) - 1 as ownership_changes
    FROM property p
    JOIN neighborhood n ON p.neighborhood_id = n.neighborhood_id
    JOIN ownership ow ON p.property_id = ow.property_id
    GROUP BY p.property_id, n.neighborhood_name
    HAVING COUNT(ow.ownership_id) > 1
)
SELECT
    neighborhood_name,
    AVG(CAST(ownership_changes AS REAL)) as avg_ownership_changes,
    COUNT(*) as properties_counted
FROM ownership_counts
GROUP BY neighborhood_name
ORDER BY avg_ownership_changes DESC, neighborhood_name
"""

# 2. Properties By Owner
# One row per ownership period, so a property the owner bought twice
# appears twice. {current_filter} narrows to the property's current ownership.
PROPERTIES_BY_OWNER_SQL = f"""
WITH {CURRENT_OWNERSHIP_CTE}
SELECT
    o.full_name as owner_name,
    p.property_id,
    n.neighborhood_name,
    pt.property_type_name,
    p.market_value,
    {FULL_ADDRESS_SQL} as full_address,
    ow.ownership_start_year,
    ow.ownership_end_year,
    ow.ownership_duration_years
FROM property p
JOIN ownership_details ow ON p.property_id = ow.property_id
JOIN owner o ON ow.owner_id = o.owner_id
JOIN neighborhood n ON p.neighborhood_id = n.neighborhood_id
JOIN property_type pt ON p.property_type_id = pt.property_type_id
WHERE o.owner_id = ?
  {{current_filter}}
ORDER BY p.market_value DESC, p.property_id, ow.ownership_start_year
"""

CURRENT_OWNERSHIP_FILTER = (
    "AND ow.ownership_id IN (SELECT ownership_id FROM current_ownership WHERE recency = 1)"
)

# 3. Never-Rented Properties
# Percentage is (never_rented / total) * 100; NULLIF keeps an empty
# neighborhood from dividing by zero.
NEVER_RENTED_SQL = """
WITH all_properties AS (
    SELECT p.property_id, p.neighborhood_id
    FROM property p
),
rented_properties AS (
    SELECT DISTINCT r.property_id
    FROM rental_detail r
),
never_rented AS (
    SELECT ap.property_id, ap.neighborhood_id
    FROM all_properties ap
    LEFT JOIN rented_properties rp ON ap.property_id = rp.property_id
    WHERE rp.property_id IS NULL
)
SELECT
    n.neighborhood_name,
    COUNT(nr.property_id) as never_rented_count,
    COUNT(ap.property_id) as total_properties,
    (COUNT(nr.property_id) * 1.0 / NULLIF(COUNT(ap.property_id), 0)) * 100 as percentage_never_rented
FROM all_properties ap
JOIN neighborhood n ON ap.neighborhood_id = n.neighborhood_id
LEFT JOIN never_rented nr ON ap.property_id = nr.property_id
GROUP BY n.neighborhood_name
ORDER BY percentage_never_rented DESC, n.neighborhood_name
"""

# 4. Active Rental Income
# The evaluation time is bound as a parameter so results are reproducible.
# julianday() compares instants, so end dates stored with a time part still
# compare correctly against a date-only evaluation time.
ACTIVE_RENTAL_INCOME_SQL = """
WITH active_rentals AS (
    SELECT rd.property_id, rd.rental_price, p.neighborhood_id
    FROM rental_detail rd
    JOIN property p ON rd.property_id = p.property_id
    WHERE rd.end_date IS NULL OR julianday(rd.end_date) > julianday(?)
)
SELECT
    n.neighborhood_name,
    SUM(CAST(ar.rental_price AS REAL)) as total_rental_income,
    COUNT(*) as active_rentals
FROM active_rentals ar
JOIN neighborhood n ON ar.neighborhood_id = n.neighborhood_id
GROUP BY n.neighborhood_name
ORDER BY total_rental_income DESC, n.neighborhood_name
"""

# 5. Properties In Neighborhood
PROPERTIES_IN_NEIGHBORHOOD_SQL = f"""
SELECT
    n.neighborhood_name,
    p.property_id,
    pt.property_type_name,
    p.market_value,
    p.square_feet,
    p.price_per_sqft,
    {FULL_ADDRESS_SQL} as full_address
FROM property_details p
JOIN neighborhood n ON p.neighborhood_id = n.neighborhood_id
JOIN property_type pt ON p.property_type_id = pt.property_type_id
WHERE n.neighborhood_id = ?
ORDER BY p.market_value DESC, p.property_id
"""

# 6. Price Extremes Per Property Type
# RANK() keeps ties: two properties sharing rank 1 push the next one to
# rank 3, and every row tied at the cut-off rank is returned.
PRICE_EXTREMES_SQL = """
WITH ranked_properties AS (
    SELECT
        pt.property_type_name,
        p.property_id,
        n.neighborhood_name,
        p.market_value,
        RANK() OVER (PARTITION BY pt.property_type_id ORDER BY p.market_value DESC) as most_expensive_rank,
        RANK() OVER (PARTITION BY pt.property_type_id ORDER BY p.market_value ASC) as least_expensive_rank
    FROM property p
    JOIN property_type pt ON p.property_type_id = pt.property_type_id
    JOIN neighborhood n ON p.neighborhood_id = n.neighborhood_id
    WHERE p.market_value IS NOT NULL
)
SELECT
    'Most Expensive' as rank_category,
    most_expensive_rank as property_rank,
    property_type_name,
    neighborhood_name,
    property_id,
    market_value
FROM ranked_properties
WHERE most_expensive_rank <= :rank_limit

UNION ALL

SELECT
    'Least Expensive' as rank_category,
    least_expensive_rank as property_rank,
    property_type_name,
    neighborhood_name,
    property_id,
    market_value
FROM ranked_properties
WHERE least_expensive_rank <= :rank_limit
ORDER BY property_type_name, rank_category, property_rank, market_value DESC, property_id
"""

# 7. Neighborhood Diversity (Simpson index from the demographic_details view)
NEIGHBORHOOD_DIVERSITY_SQL = """
SELECT
    n.neighborhood_name,
    d.total_population,
    d.diversity_index
FROM demographic_details d
JOIN neighborhood n ON d.neighborhood_id = n.neighborhood_id
ORDER BY d.diversity_index IS NULL, d.diversity_index DESC, n.neighborhood_name
"""
