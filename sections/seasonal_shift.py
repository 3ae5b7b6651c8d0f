"""
sections/seasonal_shift.py
--------------------------
'Seasonal Shift' section — mean monthly rainfall in the earlier and
later halves of the weather record, side by side.
"""

import streamlit as st

from utils.charts import seasonal_rainfall_chart
from utils.constants import CHART_CONFIG
from utils.data_loaders import load_weather_summary


def render():
    st.title("Seasonal Shift in Rainfall")
    st.markdown("""
    Average rainfall by calendar month, comparing the two halves of the
    historical record.
    """)

    rain = load_weather_summary()["rainfall"]
    if rain.empty:
        st.info("seasonal_rainfall.csv has no rows. Check the weather file.")
        return

    fig = seasonal_rainfall_chart(rain)
    st.plotly_chart(fig, use_container_width=True, config=CHART_CONFIG)

    st.caption("Source: historical Toronto urban weather file (RAIN_Mm).")
