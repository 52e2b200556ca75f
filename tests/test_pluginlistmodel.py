import pytest

from headunit.pluginlist import PluginList
from headunit.pluginlistmodel import (
    ListType,
    PluginListModel,
    PluginListProxyModel,
    PluginRole,
)
from headunit.pluginobject import PluginObject


def make_plugins():
    plugins = PluginList()
    plugins.add_plugin(
        PluginObject(
            "A",
            "Alpha",
            icon="a.svg",
            source="a.qml",
            settings_menu={"type": "loader"},
            bottom_bar_items=[{"name": "w", "source": "w.qml", "label": "W"}],
        )
    )
    plugins.add_plugin(PluginObject("B", "Beta"))
    plugins.add_plugin(PluginObject("C", "Gamma", source="c.qml"))
    return plugins


def test_role_names():
    names = PluginListModel().role_names()
    assert len(names) == 9
    assert names[PluginRole.NAME] == "name"
    assert names[PluginRole.QML_SOURCE] == "qmlSource"
    assert names[PluginRole.LOADED] == "pluginLoaded"
    assert names[PluginRole.BOTTOM_BAR_ITEMS] == "bottomBarItems"


def test_empty_model():
    model = PluginListModel()
    assert model.row_count() == 0
    assert model.data(0, PluginRole.NAME) is None


def test_data_roles():
    model = PluginListModel()
    model.set_plugins(make_plugins())
    assert model.row_count() == 3
    assert model.data(0, PluginRole.NAME) == "A"
    assert model.data(0, PluginRole.LABEL) == "Alpha"
    assert model.data(0, PluginRole.ICON) == "a.svg"
    assert model.data(0, PluginRole.QML_SOURCE) == "a.qml"
    assert model.data(0, PluginRole.LOADED) is False
    assert model.data(0, PluginRole.SETTINGS_MENU) == {"type": "loader"}
    assert model.data(0, PluginRole.CONTEXT_PROPERTY) is None
    assert model.data(0, PluginRole.BOTTOM_BAR_ITEMS) == [{"name": "A::w", "label": "W"}]
    assert model.data(1, PluginRole.BOTTOM_BAR_ITEMS) == []


def test_unknown_role_raises():
    model = PluginListModel()
    model.set_plugins(make_plugins())
    with pytest.raises(ValueError):
        model.data(0, 1)


def test_loaded_change_reports_row():
    plugins = make_plugins()
    model = PluginListModel()
    model.set_plugins(plugins)
    changed = []
    model.data_changed.connect(changed.append)
    plugins[1].init()
    assert changed == [1]
    assert model.data(1, PluginRole.LOADED) is True


def test_added_plugin_reports_inserted_row():
    plugins = make_plugins()
    model = PluginListModel()
    model.set_plugins(plugins)
    inserted = []
    model.rows_inserted.connect(inserted.append)
    plugins.add_plugin(PluginObject("D", "Delta"))
    assert inserted == [3]
    assert model.row_count() == 4


def test_proxy_filters():
    proxy = PluginListProxyModel()
    proxy.set_plugins(make_plugins())
    assert proxy.rows() == [0, 1, 2]
    proxy.set_type("MainMenu")
    assert proxy.list_type is ListType.MENU_ITEMS
    assert proxy.rows() == [0, 2]
    proxy.set_type("settingsmenu")
    assert proxy.rows() == [0]
    proxy.set_type("BottomBar")
    assert proxy.rows() == [0]
    proxy.set_type("all")
    assert proxy.rows() == [0, 1, 2]


def test_unknown_type_keeps_current():
    proxy = PluginListProxyModel()
    proxy.set_plugins(make_plugins())
    proxy.set_type("mainmenu")
    proxy.set_type("bogus")
    assert proxy.list_type is ListType.MENU_ITEMS
    proxy.set_type("")
    assert proxy.list_type is ListType.PLUGINS


def test_set_type_invalidates_filter():
    proxy = PluginListProxyModel()
    calls = []
    proxy.filter_invalidated.connect(lambda: calls.append(True))
    proxy.set_type("plugin")
    assert calls == [True]