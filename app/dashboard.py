# app/dashboard.py

# Configure import path (sys.path) when started with 'streamlit run app/dashboard.py'
import os, sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import streamlit as st
import requests
import json
import pandas as pd
from typing import List
from app import config
from app.models import Product
from app.logger import configure_logging, get_logger

configure_logging()

# Create logger object
log = get_logger(__name__)
log.info("Streamlit catalog console is starting...")

API_URL = config.API_URL
PRODUCTS_URL = f"{API_URL}/api/v1/products"


def main():
	# Page settings
	st.set_page_config(
	page_title="Product Catalog",
	page_icon="🛒",
	layout="centered"
	)

	st.title("Product Catalog")

	#Initialize session_states
	initialize_sessions()

	page = st.sidebar.radio("Page", ["Browse Catalog", "Top Products", "Sync External"], key="page")

	# Identity forwarded to the API for write operations
	st.sidebar.text_input("User id", key="user_id")
	st.sidebar.text_input("User name", key="user_name")

	if page == "Browse Catalog":
		run_browse()
	elif page == "Top Products":
		run_top_products()
	else:
		run_sync()


def user_headers() -> dict:
	return {"X-User-Id": st.session_state.user_id, "X-User-Name": st.session_state.user_name}


def run_browse():
	"""
	Browse mode:
	- Calls the list endpoint with search/limit/skip
	- Shows totals in the sidebar and allows JSON/CSV export of the page
	"""
	st.header("Browse Catalog")

	search = st.text_input("Search product", placeholder="Ex: laptop", key="search")
	col1, col2 = st.columns(2)
	with col1:
		st.number_input("Limit", min_value=0, step=1, key="limit")
	with col2:
		st.number_input("Skip", min_value=0, step=1, key="skip")

	if st.button("Search"):
		log.info(f"Search button clicked. Search: '{search}'")
		params = {"search": search, "limit": st.session_state.limit, "skip": st.session_state.skip}

		with st.spinner("Loading..."):
			try:
				response = requests.get(PRODUCTS_URL, params=params, timeout=15)

				if response.status_code == 200:
					page = response.json()
					st.session_state.products = [Product(**prod_dict) for prod_dict in page["products"]]
					st.session_state.page_info = {k: page[k] for k in ("total", "max_limit", "max_skip")}
					log.info(f"Browse successful. Got {len(st.session_state.products)} products for search: '{search}'.")
				elif response.status_code == 404:
					st.session_state.products = []
					st.info("No products have been found.")
					log.warning(f"API returned 404 (Not Found) for search: '{search}'.")
				else:
					show_api_error(response)
			except requests.exceptions.RequestException as e:
				st.error(f"API connection error: {e}")
				log.exception(f"API connection error for search: '{search}'. Exception {e}")

	if st.session_state.products:
		info = st.session_state.page_info
		with st.sidebar:
			st.markdown("---")
			st.metric("Catalog Size", info["total"])
			st.metric("Shown", len(st.session_state.products))
			st.caption(f"Max limit {info['max_limit']}, max skip {info['max_skip']}")

		with st.container():
			col1, col2 = st.columns([1,1])
			with col1:
				downloaded_json = download_datas(st.session_state.products, "json")
			with col2:
				downloaded_csv = download_datas(st.session_state.products, "csv")
		for downloaded in (downloaded_json, downloaded_csv):
			if downloaded:
				log.info(f"{downloaded} file has been downloaded")
				st.success(f"{downloaded} file has been downloaded")

		display_products(st.session_state.products)
	else:
		st.info("No products to display. Please run a search.")


def run_top_products():
	st.header("Top Products")
	try:
		response = requests.get(f"{PRODUCTS_URL}/top", timeout=15)
	except requests.exceptions.RequestException as e:
		st.error(f"API connection error: {e}")
		log.exception(f"API connection error for top products. Exception {e}")
		return

	if response.status_code != 200:
		show_api_error(response)
		return

	products = [Product(**prod_dict) for prod_dict in response.json()]
	if products:
		display_products(products)
	else:
		st.info("The catalog is empty.")


def run_sync():
	st.header("Sync External Products")

	with st.form("sync_form"):
		source = st.selectbox("Source", ["fakestore", "bestbuy", "amazon"])
		category = st.text_input("Category", value="electronics")
		limit = st.number_input("Limit", min_value=1, max_value=100, value=20, step=1)
		submitted = st.form_submit_button("Sync", type="primary")

	if not submitted:
		return

	if not st.session_state.user_id:
		st.warning("Please enter a user id!")
		return

	log.info(f"Sync requested from '{source}' with category='{category}' limit={limit}")
	with st.spinner(f"Syncing from {source}..."):
		try:
			response = requests.post(
				f"{PRODUCTS_URL}/sync-external",
				json={"api_source": source, "category": category or None, "limit": int(limit)},
				headers=user_headers(),
				timeout=60
			)
		except requests.exceptions.RequestException as e:
			st.error(f"API connection error: {e}")
			log.exception(f"API connection error for sync from '{source}'. Exception {e}")
			return

	if response.status_code == 200:
		result = response.json()
		st.success(result["message"])
		st.metric("Catalog Size", result["total_products"])
	else:
		show_api_error(response)


def show_api_error(response):
	"""Map an API error response to a message."""
	try:
		detail = response.json().get("detail")
	except ValueError:
		detail = response.text

	if response.status_code == 401:
		st.warning("Please enter a user id!")
	elif response.status_code in (400, 404, 422):
		st.warning(f"{detail}")
	else:
		st.error(f"Unexpected error: {response.status_code}.\nPlease try a bit later.")
	log.error(f"API returned status code {response.status_code}. Response: {response.text}")


def display_products(products: List[Product]):
	"""Display products in a consistent format."""
	for product in products:
		with st.container():
			col1, col2 = st.columns([1,3])

			with col1:
				if product.image.startswith(("http://", "https://")):
					st.image(product.image, width=150)
				else:
					st.write("🖼️ No image ")

			with col2:
				st.subheader(product.name)
				st.caption(f"{product.brand} · {product.category}")

				col2_1, col2_2, col2_3 = st.columns(3)
				with col2_1:
					st.metric("Price", f"₹{product.price:,.0f}")
				with col2_2:
					st.metric("Rating", f"{product.rating:.1f}/5")
				with col2_3:
					st.metric("Reviews", f"{product.num_reviews:,}")

				if product.is_external_product:
					st.caption(f"Imported from {product.external_source}")
			st.divider()


def download_datas(products:List[Product], data_type:str):
	"""
	Download datas as JSON or CSV format.

	Args:
		products: List[Product] : Products shown on the page
		data_type: str : Datas download type. 'json', 'csv'
	"""
	rows = [p.model_dump(mode="json", exclude={"reviews"}) for p in products]
	if data_type == 'json':
		if st.download_button(
			label = "📥 Download Page as JSON File",
			data = json.dumps(rows, indent=2, ensure_ascii=False),
			file_name = "products.json",
			mime = "application/json"
		):
			return "JSON"
	else:
		if st.download_button(
			label = "📥 Download Page as CSV File",
			data = pd.DataFrame(rows).to_csv(index=False).encode("utf-8"),
			file_name = "products.csv",
			mime = "text/csv"
		):
			return "CSV"
	return None


def initialize_sessions():
	"""Initialize session state variables."""
	defaults = {
		"limit": 0,
		"skip": 0,
		"user_id": "",
		"user_name": "",
		"products": None,
		"page_info": {},
	}
	for key, value in defaults.items():
		if key not in st.session_state:
			st.session_state[key] = value
			log.debug(f"Session state '{key}' initialized.")


if __name__ == "__main__":
	main()
