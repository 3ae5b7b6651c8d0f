"""
sections/temperature_trend.py
-----------------------------
'Temperature Trend' section — mean annual air temperature from the
historical Toronto urban weather file.
"""

import streamlit as st

from utils.charts import temperature_trend_chart
from utils.constants import CHART_CONFIG
from utils.data_loaders import load_weather_summary
from utils.weather import temperature_axis_range


def render():
    st.title("Temperature Trend")
    st.markdown("""
    Mean air temperature for each year of the historical weather file,
    converted from Kelvin to Celsius.
    """)

    annual = load_weather_summary()["annual"]
    if annual.empty:
        st.info("annual_temperature.csv has no rows. Check the weather file.")
        return

    first, last = annual.iloc[0], annual.iloc[-1]
    col1, col2, col3 = st.columns(3)
    col1.metric(f"Mean {int(first['year'])}", f"{first['temp']:.1f} °C")
    col2.metric(
        f"Mean {int(last['year'])}", f"{last['temp']:.1f} °C",
        delta=f"{last['temp'] - first['temp']:+.1f} °C",
    )
    col3.metric("Warmest year", f"{int(annual.loc[annual['temp'].idxmax(), 'year'])}")

    fig = temperature_trend_chart(annual, temperature_axis_range(annual))
    st.plotly_chart(fig, use_container_width=True, config=CHART_CONFIG)
