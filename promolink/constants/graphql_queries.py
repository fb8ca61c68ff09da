from __future__ import annotations

SELECTION_SET_VERSION = "variables-v1"

GENERATE_SHORT_LINK_MUTATION = """
mutation GenerateShortLink($originUrl: String!, $subIds: [String!]) {
  generateShortLink(input: { originUrl: $originUrl, subIds: $subIds }) {
    shortLink
  }
}
""".strip()

PRODUCT_OFFER_V2_QUERY = """
query ProductOfferV2($itemId: Int64, $shopId: Int64, $keyword: String, $sortType: Int, $page: Int, $isAMSOffer: Boolean, $isKeySeller: Boolean, $limit: Int) {
  productOfferV2(itemId: $itemId, shopId: $shopId, keyword: $keyword, sortType: $sortType, page: $page, isAMSOffer: $isAMSOffer, isKeySeller: $isKeySeller, limit: $limit) {
    nodes {
      itemId
      commissionRate
      sellerCommissionRate
      shopeeCommissionRate
      commission
      sales
      priceMax
      priceMin
      productCatIds
      ratingStar
      priceDiscountRate
      imageUrl
      productName
      shopId
      shopName
      shopType
      productLink
      offerLink
      periodStartTime
      periodEndTime
    }
    pageInfo {
      page
      limit
      hasNextPage
    }
  }
}
""".strip()
