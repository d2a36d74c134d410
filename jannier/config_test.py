"""Test for config.py"""
from absl.testing import absltest

from jannier.config import JannierConfigDict, default_config, get_config


class _TestConfig(absltest.TestCase):

  def test_default(self):
    config = get_config()
    self.assertIsInstance(config, JannierConfigDict)
    for key, value in default_config.items():
      self.assertEqual(config[key], value)
    self.assertEqual(config.ws_max_neighbors, 8)
    self.assertTrue(config.use_mdrs)

  def test_yaml_override(self):
    config_file = self.create_tempfile(
      "config.yaml",
      content=(
        "use_mdrs: false\n"
        "kpath_num_points: 50\n"
        "kpath_special_points: GXL\n"
      ),
    )
    config = get_config(config_file.full_path)
    self.assertFalse(config.use_mdrs)
    self.assertEqual(config.kpath_num_points, 50)
    self.assertEqual(config.kpath_special_points, "GXL")
    self.assertEqual(config.ws_search_size, default_config["ws_search_size"])

  def test_invalid_search_size(self):
    config_file = self.create_tempfile(
      "config.yaml", content="ws_search_size: 0\n"
    )
    with self.assertRaises(ValueError):
      get_config(config_file.full_path)

  def test_invalid_batch_size(self):
    config_file = self.create_tempfile(
      "config.yaml", content="fourier_batch_size: 0\n"
    )
    with self.assertRaises(ValueError):
      get_config(config_file.full_path)


if __name__ == '__main__':
  absltest.main()
