"""
GraphQL query documents for Shopify Admin API.
"""


# Fields shared by every catalog query
PRODUCT_FIELDS = '''
fragment ProductListingFields on Product {
  id
  title
  status
  vendor
  productType
  tags
  totalInventory
  variants(first: 1) {
    nodes {
      id
      price
    }
  }
  images(first: 1) {
    nodes {
      url
      altText
    }
  }
}
'''

# One page of the catalog, optionally narrowed by a search query
PRODUCTS_PAGE_QUERY = '''
query ProductsPage($first: Int!, $after: String, $query: String) {
  products(first: $first, after: $after, query: $query, sortKey: TITLE) {
    nodes {
      ...ProductListingFields
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
''' + PRODUCT_FIELDS

# Fresh snapshot of specific products
PRODUCTS_BY_IDS_QUERY = '''
query ProductsByIds($ids: [ID!]!) {
  nodes(ids: $ids) {
    ... on Product {
      ...ProductListingFields
    }
  }
}
''' + PRODUCT_FIELDS

# First variant of a single product
PRODUCT_FIRST_VARIANT_QUERY = '''
query ProductFirstVariant($id: ID!) {
  product(id: $id) {
    id
    variants(first: 1) {
      nodes {
        id
        price
      }
    }
  }
}
'''

# Parent product of a variant
VARIANT_PRODUCT_QUERY = '''
query VariantProduct($id: ID!) {
  productVariant(id: $id) {
    id
    product {
      id
    }
  }
}
'''
