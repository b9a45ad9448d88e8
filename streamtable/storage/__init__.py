"""Key-value storages for table partitions, their iterators and builders."""